"""Catalog configuration."""

import os
import re
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

_UMM_VERSION_VAR = re.compile(r"^UMM_([A-Z]+)_VERSION$")


class CatalogConfig(BaseModel):
    """Configuration for talking to the upstream catalog."""

    cmr_root_url: str = "https://cmr.earthdata.nasa.gov"
    default_page_size: int = 20
    request_timeout_seconds: float = 30.0
    umm_versions: Dict[str, str] = {}       # e.g. {"subscription": "1.0"}
    log_errors: bool = True

    def umm_version(self, concept_type: str) -> Optional[str]:
        return self.umm_versions.get(concept_type)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CatalogConfig":
        """Build a config from CMR_* and UMM_<TYPE>_VERSION variables."""
        env = os.environ if environ is None else environ
        values: dict = {}

        if env.get("CMR_ROOT_URL"):
            values["cmr_root_url"] = env["CMR_ROOT_URL"].rstrip("/")
        if env.get("CMR_DEFAULT_PAGE_SIZE"):
            values["default_page_size"] = int(env["CMR_DEFAULT_PAGE_SIZE"])
        if env.get("CMR_REQUEST_TIMEOUT"):
            values["request_timeout_seconds"] = float(env["CMR_REQUEST_TIMEOUT"])

        versions = {}
        for name, value in env.items():
            match = _UMM_VERSION_VAR.match(name)
            if match and value:
                versions[match.group(1).lower()] = value
        values["umm_versions"] = versions

        return cls(**values)
