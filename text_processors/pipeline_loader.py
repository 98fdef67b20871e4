"""
Pipeline loader - reads pipeline specifications from YAML files.

A file holds a list of pipelines under the ``pipelines`` key:

    pipelines:
      - name: tokenizerAndSentiment
        textProcessor: spacy
        processingSteps:
          sentiment: true
        stopWords: [the, a]
        params:
          model: en_core_web_sm
"""

from pathlib import Path
from typing import List, Union

import yaml

from domain.requests import PipelineSpecification
from exceptions import InvalidInputError
from logger import get_logger

logger = get_logger(__name__)


class PipelineLoader:
    """Loads pipeline specifications from a YAML file or a directory of them"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _files(self) -> List[Path]:
        if self.path.is_dir():
            return sorted(list(self.path.glob("*.yaml")) + list(self.path.glob("*.yml")))
        return [self.path]

    def load(self) -> List[PipelineSpecification]:
        if not self.path.exists():
            logger.warning(f"Pipeline path does not exist: {self.path}")
            return []

        specifications = []
        for pipeline_file in self._files():
            try:
                with open(pipeline_file, "r") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load pipelines from {pipeline_file}: {e}")
                continue

            for entry in data.get("pipelines") or []:
                try:
                    specifications.append(PipelineSpecification.from_dict(entry))
                except InvalidInputError as e:
                    logger.error(f"Invalid pipeline in {pipeline_file}: {e}")

            logger.info(f"Loaded pipelines from {pipeline_file}")
        return specifications
