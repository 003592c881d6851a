"""Project descriptor and Gradle configuration files."""

from .descriptor import ProjectDescriptor, ResourceFile
from .gradle import GradleConfig, GradleProperties, write_gradle_name

__all__ = ["ProjectDescriptor", "ResourceFile", "GradleConfig", "GradleProperties", "write_gradle_name"]
