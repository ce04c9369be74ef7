"""typescript-starter -- create TypeScript projects from the starter template.

Quick usage::

    from tstarter import ProjectConfig, Tasks, typescript_starter

    config = ProjectConfig(project_name="my-lib", description="A library")
    await typescript_starter(config, Tasks())
"""

from tstarter.config import ProjectConfig, Runner
from tstarter.manifest import derive_manifest
from tstarter.pipeline import typescript_starter
from tstarter.pruning import prune_dom_feature, prune_platform_feature
from tstarter.tasks import Tasks

__all__ = [
    "ProjectConfig",
    "Runner",
    "Tasks",
    "derive_manifest",
    "prune_dom_feature",
    "prune_platform_feature",
    "typescript_starter",
]
