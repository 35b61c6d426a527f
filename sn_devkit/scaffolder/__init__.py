"""SN Devkit scaffolder -- creates a ServiceNow TypeScript project skeleton.

Quick usage::

    from sn_devkit.config import ScaffoldConfig
    from sn_devkit.scaffolder import ProjectScaffolder

    scaffolder = ProjectScaffolder(ScaffoldConfig(project_name="my-app"))
    result = await scaffolder.scaffold("/tmp/output")
"""

from sn_devkit.scaffolder.generator import ProjectScaffolder, ScaffoldResult
from sn_devkit.scaffolder.templates import TEMPLATE_FOR_FILE, TemplateRenderer

__all__ = [
    "ProjectScaffolder",
    "ScaffoldResult",
    "TEMPLATE_FOR_FILE",
    "TemplateRenderer",
]
