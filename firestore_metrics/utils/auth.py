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

"""Utilities to obtain Google credentials and bearer tokens."""

from typing import Optional, Tuple

from absl import logging
import google.auth
import google.auth.credentials
import google.auth.transport.requests
from google.oauth2 import service_account

from firestore_metrics.apis import gcp_config


def load_credentials(
    config: gcp_config.GCPConfig,
) -> Tuple[google.auth.credentials.Credentials, Optional[str]]:
  """Loads credentials from the configured source.

  Args:
    config: The GCP config holding a key file path, inline service account
      info, or neither for application default credentials.

  Returns:
    A tuple of the credentials and the project id they belong to, which is
    None when the source does not carry one.

  Raises:
    google.auth.exceptions.GoogleAuthError: If the credentials cannot be loaded.
  """
  if config.credentials is not None:
    logging.debug("Loading credentials from inline service account info.")
    creds = service_account.Credentials.from_service_account_info(
        dict(config.credentials), scopes=config.scopes
    )
    return creds, config.credentials.get("project_id")

  if config.key_path is not None:
    logging.debug(f"Loading credentials from key file {config.key_path}.")
    return google.auth.load_credentials_from_file(
        config.key_path, scopes=config.scopes
    )

  logging.debug("Loading application default credentials.")
  return google.auth.default(scopes=config.scopes)


def fetch_access_token(creds: google.auth.credentials.Credentials) -> str:
  """Refreshes the credentials and returns the new bearer token."""
  creds.refresh(google.auth.transport.requests.Request())
  logging.debug("Obtained a new access token.")
  return creds.token
