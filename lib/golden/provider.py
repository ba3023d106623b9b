"""Golden Data Provider for replaying recorded HTTP calls.

This module loads golden data files from a directory and builds replay
transports out of them.
"""

import logging
from pathlib import Path
from typing import Dict, List

from .transports import ReplayTransport
from .types import GoldenDataFile, HttpCall

logger = logging.getLogger(__name__)


def loadGoldenData(filepath: str) -> GoldenDataFile:
    """Load and validate a single golden data JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the content doesn't match the expected structure
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Golden data file not found: {filepath}")

    return GoldenDataFile.model_validate_json(path.read_text(encoding="utf-8"))


def findGoldenDataFiles(directory: str) -> List[str]:
    """Recursively find all .json files in the directory, sorted."""
    directoryPath = Path(directory)
    if not directoryPath.is_dir():
        return []

    return sorted(str(f) for f in directoryPath.rglob("*.json"))


class GoldenDataProvider:
    """Provider for loading golden data scenarios and replaying them."""

    def __init__(self, goldenDataDir: str):
        """Initialize the GoldenDataProvider with a directory containing golden data files.

        Args:
            goldenDataDir: Path to directory containing golden data JSON files
        """
        self.goldenDataDir = Path(goldenDataDir)
        self.scenarios: Dict[str, GoldenDataFile] = {}

    def loadAllScenarios(self) -> Dict[str, GoldenDataFile]:
        """Load all scenarios from the golden data directory.

        Scenario names are file paths relative to the directory, without
        the .json suffix. Broken files are logged and skipped.
        """
        self.scenarios.clear()

        for filepath in findGoldenDataFiles(str(self.goldenDataDir)):
            name = str(Path(filepath).relative_to(self.goldenDataDir).with_suffix(""))
            try:
                self.scenarios[name] = loadGoldenData(filepath)
            except ValueError as e:
                logger.error(f"Failed to load golden data file {filepath}: {e}")

        logger.info(f"Loaded {len(self.scenarios)} golden data scenarios from {self.goldenDataDir}")
        return self.scenarios

    def getScenario(self, name: str) -> GoldenDataFile:
        """Get a loaded scenario by name.

        Raises:
            KeyError: If scenario is not loaded
        """
        if name not in self.scenarios:
            raise KeyError(f"Scenario '{name}' not loaded. Call loadAllScenarios() first.")
        return self.scenarios[name]

    def allRecordings(self) -> List[HttpCall]:
        """Recordings of every loaded scenario, in scenario name order."""
        return [call for name in sorted(self.scenarios) for call in self.scenarios[name].recordings]

    def createTransport(self) -> ReplayTransport:
        """Create a replay transport answering from all loaded scenarios."""
        if not self.scenarios:
            self.loadAllScenarios()
        return ReplayTransport(self.allRecordings())
