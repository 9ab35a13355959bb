"""
Pipeline services for cdnsync.

Provides modular service packages:
- build/ - Static-site generator invocation
- aws/ - Remote listing, planning and uploads
- pipeline - Build -> plan -> sync orchestration
"""
from .pipeline import ExitCode, PipelineReport, PipelineState, PublishPipeline

__all__ = [
    'ExitCode',
    'PipelineReport',
    'PipelineState',
    'PublishPipeline',
]
