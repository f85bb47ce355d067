from __future__ import annotations

"""
Deterministic K-Means over CIE Lab points.

Exports:
  initial_centroids(points, k) -> Lab [C,3]
  assign_nearest(points, centroids) -> int64 [N]
  update_centroids(points, labels, centroids) -> Lab [C,3]
  kmeans(points, k, max_iterations=20) -> Lab [C,3]

Notes:
  - No randomness: seeds are distinct points sorted by L*, taken at a fixed stride.
  - C == min(k, distinct point count). Empty clusters keep their centroid.
  - Nearest-centroid ties go to the lowest index.
"""

import numpy as np

from .constants import KMEANS_CONVERGENCE_SQ, KMEANS_MAX_ITERATIONS
from .core_types import Lab


def _distinct_in_first_seen_order(points: Lab) -> Lab:
    """Unique rows by exact equality, kept in order of first appearance."""
    _, first_idx = np.unique(points, axis=0, return_index=True)
    return points[np.sort(first_idx)]


def initial_centroids(points: Lab, k: int) -> Lab:
    """
    Seed centroids from the distinct points sorted ascending by L*.

    Points with equal L* keep their first-seen order (stable sort).
    If there are no more than k distinct points, all of them become centroids;
    otherwise indices 0, s, 2s, ... (k-1)s with s = distinct // k are taken.
    """
    uniq = _distinct_in_first_seen_order(points)
    uniq = uniq[np.argsort(uniq[:, 0], kind="stable")]
    n_uniq = uniq.shape[0]
    if n_uniq <= k:
        return uniq.copy()
    step = n_uniq // k
    return uniq[np.arange(k) * step].copy()


def assign_nearest(points: Lab, centroids: Lab) -> np.ndarray:
    """Index of the nearest centroid per point (squared Lab distance, first minimum wins)."""
    diff = points[:, None, :] - centroids[None, :, :]
    dist2 = np.sum(diff * diff, axis=2)
    return np.argmin(dist2, axis=1)


def update_centroids(points: Lab, labels: np.ndarray, centroids: Lab) -> Lab:
    """Mean of each cluster's points; clusters with no points keep their centroid."""
    n_clusters = centroids.shape[0]
    counts = np.bincount(labels, minlength=n_clusters)
    sums = np.zeros((n_clusters, 3), dtype=np.float64)
    np.add.at(sums, labels, points)

    updated = centroids.copy()
    filled = counts > 0
    updated[filled] = sums[filled] / counts[filled, None]
    return updated


def kmeans(points: Lab, k: int, max_iterations: int = KMEANS_MAX_ITERATIONS) -> Lab:
    """
    Cluster Lab points into at most k centroids.

    Args:
      points: float [N,3] Lab rows, order is significant only for seeding ties
      k: requested cluster count (>= 1)
      max_iterations: hard cap on assign/update rounds
    Returns:
      float64 [C,3] centroids in seeding order, C = min(k, distinct points).
      Empty input returns an empty [0,3] array.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if pts.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    centroids = initial_centroids(pts, int(k))

    for _ in range(int(max_iterations)):
        labels = assign_nearest(pts, centroids)
        updated = update_centroids(pts, labels, centroids)

        moved = updated - centroids
        converged = bool(np.all(np.sum(moved * moved, axis=1) <= KMEANS_CONVERGENCE_SQ))
        centroids = updated
        if converged:
            break

    return centroids


__all__ = ["initial_centroids", "assign_nearest", "update_centroids", "kmeans"]
