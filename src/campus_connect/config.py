# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Manages the application's configuration using Pydantic."""

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Manages configuration for the application.

    Reads settings from environment variables with the prefix 'CAMPUS_'.
    """

    model_config = SettingsConfigDict(env_prefix="CAMPUS_")

    # Backend connection settings
    api_url: str = "http://localhost:8000"
    api_version: str = "v1"
    timeout_seconds: float = 10.0
    # Only needed for admin endpoints; public pages work without it.
    access_token: str | None = None

    # Length of the free trial window in days
    trial_days: int = 30

    @computed_field
    @property
    def api_base_url(self) -> str:
        """Construct the versioned REST base URL from individual settings."""
        return f"{self.api_url.rstrip('/')}/api/{self.api_version}"


# Instantiate the settings so it can be imported directly
settings = Settings()
