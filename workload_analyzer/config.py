"""
Configuration and client management for the Workload Analyzer.
"""

from databricks.sdk import WorkspaceClient
from pydantic import BaseModel, Field


class AnalyzerConfig(BaseModel):
    """
    Configuration for a workload utilization analysis.

    Attributes:
        lookback_days: Length of the trailing analysis window in days
        bucket_width_minutes: Width of each utilization time bucket in minutes
    """
    lookback_days: int = Field(default=7, gt=0, description="Length of the trailing analysis window in days")
    bucket_width_minutes: int = Field(default=1, gt=0, description="Width of each time bucket in minutes")


class SourceConfig(BaseModel):
    """
    Connection settings for the query history source.

    Attributes:
        profile: Databricks CLI profile name (preferred)
        host: Databricks workspace host URL
        token: Databricks personal access token
    """
    profile: str | None = Field(default=None, description="Databricks CLI profile name from ~/.databrickscfg")
    host: str | None = Field(default=None, description="Databricks workspace host URL")
    token: str | None = Field(default=None, description="Databricks personal access token")


def get_workspace_client(cfg: SourceConfig | None = None) -> WorkspaceClient:
    """
    Build the client the query history source reads through.

    A named profile wins over an explicit host and token; without either, the
    SDK's own environment and config-file resolution applies.
    """
    if cfg and cfg.profile:
        return WorkspaceClient(profile=cfg.profile)
    if cfg and cfg.host and cfg.token:
        return WorkspaceClient(host=cfg.host, token=cfg.token)
    return WorkspaceClient()
