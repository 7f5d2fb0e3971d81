"""
CSV export for collected hotels.
"""

import csv
import os
import tempfile
from pathlib import Path
from typing import Iterable, Union
import logging

from .base import ExportError, HotelRecord

logger = logging.getLogger('scraper.export')

CSV_HEADER = ['Name', 'Location', 'Price']


def save_to_csv(hotels: Iterable[HotelRecord], filename: Union[str, Path]) -> Path:
    """
    Write hotels to a UTF-8 CSV file with a Name,Location,Price header.

    The rows go to a temporary file next to the target which is renamed
    into place once complete, so a failed export leaves no partial file.

    Args:
        hotels: Records to write, in order
        filename: Output path

    Returns:
        The output path

    Raises:
        ExportError: If there is nothing to write or the file cannot be written
    """
    hotels = list(hotels)
    if not hotels:
        raise ExportError("No hotels found to save")

    path = Path(filename)
    directory = path.parent if str(path.parent) else Path('.')

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=directory)
        with os.fdopen(fd, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for hotel in hotels:
                writer.writerow(hotel.as_row())
        os.chmod(tmp_name, 0o644)  # mkstemp creates 0600
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise ExportError(f"Could not write {path}: {e}") from e

    logger.debug(f"Wrote {len(hotels)} rows to {path}")
    return path
