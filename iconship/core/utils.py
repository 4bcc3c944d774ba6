"""
Common utility functions for the iconship package.

This module provides utility functions used across the iconship package:
- Run identifiers
- File and directory operations
- Path sanitizing
"""

import os
import json
import time
import uuid
from typing import Dict, Any

def generate_run_id() -> str:
    """
    Generate an identifier that is unique per pipeline run.

    The identifier is a millisecond timestamp followed by a short random
    suffix, so two runs started in the same millisecond still differ.

    Returns:
        str: Run identifier, e.g. "1700000000000-3f9a1c2b"
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"

def ensure_dir(path: str) -> str:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path (str): Directory path

    Returns:
        str: The directory path
    """
    os.makedirs(path, exist_ok=True)
    return path

def write_text_file(file_path: str, content: str) -> str:
    """
    Write text to a file using UTF-8.

    Args:
        file_path (str): Destination path
        content (str): Text to write

    Returns:
        str: The file path
    """
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(content)
    return file_path

def save_json_file(data: Dict[str, Any], file_path: str, indent: int = 2) -> None:
    """
    Save data to a JSON file.

    Args:
        data (Dict[str, Any]): Data to save
        file_path (str): Path to save JSON file
        indent (int, optional): JSON indentation level
    """
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent)

def sanitize_path_component(component: str) -> str:
    """
    Sanitize a string for use as a single path component.

    Spaces become underscores, characters other than alphanumerics and
    "_-." are removed and the result is lower-cased.

    Args:
        component (str): Path component to sanitize

    Returns:
        str: Sanitized path component ("package" if nothing is left)
    """
    component = component.replace(" ", "_")
    component = "".join(c for c in component if c.isalnum() or c in "_-.")
    component = component.strip(".").lower()
    return component or "package"
