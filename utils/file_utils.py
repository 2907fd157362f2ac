# utils/file_utils.py
import os
import logging


def operator_temp_dir(base_dir: str, operator: str) -> str:
    path = os.path.join(base_dir, operator)
    os.makedirs(path, exist_ok=True)
    return path


def is_inside(path: str, directory: str) -> bool:
    path = os.path.realpath(path)
    directory = os.path.realpath(directory)
    return os.path.commonpath([path, directory]) == directory


def cleanup_files(temp_dir: str, *file_paths):
    """Best-effort removal of scratch files; only files under temp_dir are touched."""
    for file_path in file_paths:
        if not file_path:
            continue
        try:
            if os.path.exists(file_path) and is_inside(file_path, temp_dir):
                os.remove(file_path)
                logging.debug(f"Removed temp file {file_path}")
        except OSError as e:
            logging.warning(f"Failed to remove temp file {file_path}: {e}")
