# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Config file for the Google Cloud project and credentials to query."""

import dataclasses
from typing import Any, List, Mapping, Optional


MONITORING_BASE_URL = "https://monitoring.googleapis.com/v3/projects"

MONITORING_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/monitoring",
    "https://www.googleapis.com/auth/monitoring.read",
]


@dataclasses.dataclass
class GCPConfig:
  """This is a class to set up configs of the monitored project.

  At most one credential source should be set. When none is set, application
  default credentials are used.

  Attributes:
    project_id: The project whose Firestore metrics are queried. Resolved from
      the credentials when not set.
    key_filename: Path to a service account .json key file.
    key_file: Alias of key_filename, kept for callers that use that name.
    credentials: Service account info as a mapping, e.g. the parsed content of
      a key file with `client_email` and `private_key`.
    scopes: OAuth scopes requested for the access token.
    base_url: Base URL of the Cloud Monitoring v3 projects resource.
    timeout: Seconds to wait for each HTTP response.
  """

  project_id: Optional[str] = None
  key_filename: Optional[str] = None
  key_file: Optional[str] = None
  credentials: Optional[Mapping[str, Any]] = None
  scopes: List[str] = dataclasses.field(
      default_factory=lambda: list(MONITORING_SCOPES)
  )
  base_url: str = MONITORING_BASE_URL
  timeout: float = 60

  def __post_init__(self):
    if self.key_filename and self.key_file and (
        self.key_filename != self.key_file
    ):
      raise ValueError(
          "Only one of key_filename and key_file can be set, got"
          f" {self.key_filename} and {self.key_file}."
      )
    if self.credentials is not None and self.key_path is not None:
      raise ValueError("Set either inline credentials or a key file, not both.")

  @property
  def key_path(self) -> Optional[str]:
    return self.key_filename or self.key_file
