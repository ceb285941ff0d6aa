"""Convergence metric and release readiness."""

FULL_CONVERGENCE = 100


def calculate_convergence(dependency_count: int, artifact_count: int) -> int:
    """
    Return the convergence percentage, rounded down.

    dependency_count is the number of distinct identities, artifact_count the
    number of distinct (identity, version) pairs. A build without dependencies
    is fully converged.
    """
    if dependency_count <= 0 or artifact_count <= 0:
        return FULL_CONVERGENCE
    return FULL_CONVERGENCE * dependency_count // artifact_count


def is_release_ready(convergence: int, snapshot_count: int) -> bool:
    """A build is ready for release when fully converged and free of snapshots."""
    return convergence >= FULL_CONVERGENCE and snapshot_count <= 0
