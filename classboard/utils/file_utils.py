"""
File operation utilities.

This module provides utilities for loading day snapshots and saving
reports and ledgers in various formats (JSON, CSV).
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, Any, Optional

import pandas as pd


logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    # Money values are written as strings to keep their exact digits
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def save_json(data: Dict[str, Any], filepath: Path) -> bool:
    """
    Save data to JSON file.

    Args:
        data: Dictionary data to save (Decimal values become strings)
        filepath: Path to save the JSON file

    Returns:
        True if save successful, False otherwise

    Examples:
        >>> data = {"teacher_id": "t1", "events": 3}
        >>> save_json(data, Path("output/reports/test.json"))
        True
    """
    try:
        # Ensure parent directory exists
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2, default=_json_default)

        logger.debug(f"Saved JSON file: {filepath}")
        return True

    except Exception as e:
        logger.error(f"Failed to save JSON file {filepath}: {e}", exc_info=True)
        return False


def load_json(filepath: Path) -> Optional[Dict[str, Any]]:
    """
    Load data from JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        Loaded data dictionary, or None if load failed

    Examples:
        >>> snapshot = load_json(Path("data/2025-06-01.json"))
        >>> if snapshot:
        ...     print(snapshot["date"])
    """
    try:
        if not filepath.exists():
            logger.warning(f"JSON file not found: {filepath}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        logger.debug(f"Loaded JSON file: {filepath}")
        return data

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {filepath}: {e}")
        return None

    except Exception as e:
        logger.error(f"Failed to load JSON file {filepath}: {e}", exc_info=True)
        return None


def save_csv(df: pd.DataFrame, filepath: Path) -> bool:
    """
    Save DataFrame to CSV file.

    Args:
        df: Pandas DataFrame to save
        filepath: Path to save the CSV file

    Returns:
        True if save successful, False otherwise

    Examples:
        >>> df = pd.DataFrame({"event_id": ["e1"], "teacher_earnings": ["25.00"]})
        >>> save_csv(df, Path("output/ledgers/test.csv"))
        True
    """
    try:
        # Ensure parent directory exists
        filepath.parent.mkdir(parents=True, exist_ok=True)

        # Save CSV with UTF-8 encoding
        df.to_csv(filepath, index=False, encoding='utf-8')

        logger.debug(f"Saved CSV file: {filepath}")
        return True

    except Exception as e:
        logger.error(f"Failed to save CSV file {filepath}: {e}", exc_info=True)
        return False


def generate_filename(prefix: str, extension: str) -> str:
    """
    Generate timestamped filename.

    Args:
        prefix: Filename prefix
        extension: File extension (without dot)

    Returns:
        Filename with timestamp (e.g., "prefix_20251101_103045.ext")

    Examples:
        >>> filename = generate_filename("classboard_report", "json")
        >>> # Returns something like: "classboard_report_20251101_103045.json"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"
