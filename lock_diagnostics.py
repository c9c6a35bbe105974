"""
Lock diagnostics: find which processes hold a file open.

Used only for reporting when a sharing violation outlasts the retry budget.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Union

import psutil

logger = logging.getLogger(__name__)


def find_processes_using(path: Union[str, Path]) -> List[Dict]:
    """
    Scan running processes for open handles on the given path.

    Processes that vanish or deny access while being inspected are skipped.

    Returns:
        List of dicts with 'pid' and 'name' keys
    """
    target = os.path.normcase(os.path.abspath(str(path)))
    holders = []
    for proc in psutil.process_iter(['pid', 'name']):
        try:
            for open_file in proc.open_files():
                if os.path.normcase(open_file.path) == target:
                    holders.append({'pid': proc.info['pid'], 'name': proc.info['name']})
                    break
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return holders


def describe_lockers(path: Union[str, Path]) -> str:
    """Human readable summary of the processes holding a path, for log output."""
    try:
        holders = find_processes_using(path)
    except psutil.Error as e:
        logger.debug(f"Could not enumerate processes for {path}: {e}")
        return "unknown"

    if not holders:
        return "no process found"
    return ", ".join(f"{h['name']} (PID: {h['pid']})" for h in holders)
