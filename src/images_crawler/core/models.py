"""Shared data models for the images crawler."""

import os
import shlex
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .path_utils import (
    DEFAULT_EXTENSIONS,
    calculate_dest_key,
    clean_key,
    clean_tags,
    logical_path,
)


class StorageSettings(BaseModel):
    """Connection settings for the object store and the metadata tables."""

    model_config = ConfigDict(frozen=True)

    bucket: str = "images"
    key_prefix: str = ""
    image_set_table: str = "imagesets"
    image_transform_table: str = "imagetransforms"
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "StorageSettings":
        """
        Build settings from environment variables.

        Environment Variables:
            IMAGES_BUCKET: Destination bucket for uploaded images
            IMAGES_KEY_PREFIX: Prefix prepended to every object key
            IMAGE_SET_TABLE: Table holding image set records
            IMAGE_TRANSFORM_TABLE: Table holding transform descriptors
            AWS_REGION: Region for both stores
            AWS_ENDPOINT_URL: Custom endpoint (S3/DynamoDB compatible services)

        Keyword overrides that are not None win over the environment.
        """
        values: Dict[str, Any] = {}
        env_map = {
            "bucket": "IMAGES_BUCKET",
            "key_prefix": "IMAGES_KEY_PREFIX",
            "image_set_table": "IMAGE_SET_TABLE",
            "image_transform_table": "IMAGE_TRANSFORM_TABLE",
            "region_name": "AWS_REGION",
            "endpoint_url": "AWS_ENDPOINT_URL",
        }
        for field_name, env_name in env_map.items():
            env_value = os.getenv(env_name)
            if env_value:
                values[field_name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class CrawlConfig(BaseModel):
    """Configuration for a single crawl run."""

    model_config = ConfigDict(frozen=True)

    root: str
    version: str = "0"
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    max_parallel_upserts: int = Field(default=5, ge=1)
    max_parallel_uploads: int = Field(default=20, ge=1)
    debug: bool = False


class ImageTransform(BaseModel):
    """A named, versioned invocation template for an external image tool."""

    model_config = ConfigDict(frozen=True)

    INPUT_FILE: ClassVar[str] = "{infile}"
    OUTPUT_FILE: ClassVar[str] = "{outfile}"

    name: str
    version: str
    command_line_arguments: str = ""

    @property
    def partition_key(self) -> str:
        return clean_key(self.name)

    @property
    def row_key(self) -> str:
        return clean_key(self.version)

    def get_command_line_arguments(self, input_file: str, output_file: str) -> str:
        """Substitute the placeholders in the template and return one string."""
        return self.command_line_arguments.replace(
            self.INPUT_FILE, input_file
        ).replace(self.OUTPUT_FILE, output_file)

    def command_args(self, input_file: str, output_file: str) -> List[str]:
        """
        Argument vector for the template.

        The template is tokenized before substitution so paths containing
        spaces stay a single argument.
        """
        return [
            token.replace(self.INPUT_FILE, input_file).replace(
                self.OUTPUT_FILE, output_file
            )
            for token in shlex.split(self.command_line_arguments)
        ]

    def to_item(self) -> Dict[str, Any]:
        return {
            "PartitionKey": self.partition_key,
            "RowKey": self.row_key,
            "Name": self.name,
            "Version": self.version,
            "CommandLineArguments": self.command_line_arguments,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "ImageTransform":
        return cls(
            name=item["Name"],
            version=item["Version"],
            command_line_arguments=item.get("CommandLineArguments", ""),
        )


class ImageSet(BaseModel):
    """Metadata for one directory's worth of (possibly transformed) images."""

    model_config = ConfigDict(frozen=True)

    suffix: str
    version: str
    tags: Tuple[str, ...] = ()
    transform: Optional[ImageTransform] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> Tuple[str, ...]:
        return tuple(clean_tags(value or ()))

    @property
    def path(self) -> str:
        return logical_path(self.suffix)

    @property
    def destination_key(self) -> str:
        if self.transform is None:
            return calculate_dest_key(self.suffix, self.version)
        return calculate_dest_key(
            self.suffix, self.version, self.transform.name, self.transform.version
        )

    @property
    def partition_key(self) -> str:
        return clean_key(self.path)

    @property
    def row_key(self) -> str:
        return clean_key(self.version)

    def to_item(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "PartitionKey": self.partition_key,
            "RowKey": self.row_key,
            "Path": self.path,
            "Tags": list(self.tags),
            "BlobPath": self.destination_key,
            "Version": self.version,
        }
        if self.transform is not None:
            item["TransformName"] = self.transform.name
            item["TransformVersion"] = self.transform.version
        return item


class ImageGroup(NamedTuple):
    """Files found directly inside one directory of the crawl root."""

    suffix: str
    files: List[str]


class TransformOutcome(BaseModel):
    """What the transform runner produced for one group."""

    suffix: str
    output_dir: str
    files: List[str] = Field(default_factory=list)
    failed_files: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files


class CrawlSummary(BaseModel):
    """Counts reported by a finished crawl."""

    image_sets: int = 0
    uploads: int = 0
    dropped_groups: int = 0
    skipped_files: int = 0
    processing_time: float = 0.0
