"""Helpers for splitting ``gs://bucket/dataset`` storage names."""

from __future__ import annotations

STORAGE_SCHEME = "gs://"


def split_data_storage_name(data_storage_name: str) -> tuple[str, str]:
    """
    Split a storage name into its bucket and dataset path.

    Args:
        data_storage_name: Name such as ``gs://bucket/dataset/sub``. The scheme
            is optional.

    Returns:
        Tuple of (bucket, dataset_path). The dataset path has no leading or
        trailing slashes and is empty when the name refers to a whole bucket.
    """
    name = data_storage_name.strip()
    if name.startswith(STORAGE_SCHEME):
        name = name[len(STORAGE_SCHEME) :]
    name = name.strip("/")

    bucket, _, dataset = name.partition("/")
    return bucket, dataset.strip("/")


def get_bucket_name(data_storage_name: str, suffix: str = "") -> str:
    """Return the bucket of a storage name, with ``suffix`` appended."""
    bucket, _ = split_data_storage_name(data_storage_name)
    return f"{bucket}{suffix}"


def get_dataset_path(data_storage_name: str) -> str:
    """Return the dataset path of a storage name, empty for a whole bucket."""
    _, dataset = split_data_storage_name(data_storage_name)
    return dataset
