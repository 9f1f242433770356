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

"""Utility functions for querying the Cloud Monitoring timeSeries REST API."""

import dataclasses
import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from absl import logging
import requests

from firestore_metrics.apis.metric_config import METRIC_TYPE_PREFIX


class MonitoringApiError(Exception):
  """Exception raised when the timeSeries endpoint does not answer with 200."""

  def __init__(self, status_code: int, reason: str, body: str):
    super().__init__(body)
    self.status_code = status_code
    self.reason = reason
    self.body = body

  @property
  def is_billing_disabled(self) -> bool:
    # The API answers 403 when billing is not enabled on the project.
    return self.status_code == 403


@dataclasses.dataclass
class TimeSeriesPages:
  """All `timeSeries` entries of a query, gathered across response pages."""

  status: int
  status_text: str
  time_series: List[Dict[str, Any]] = dataclasses.field(default_factory=list)
  body: Optional[str] = None
  page_count: int = 0

  @property
  def ok(self) -> bool:
    return self.status == 200


def metric_filter(metric_name: str) -> str:
  """Composes the filter that selects one Firestore metric type."""
  return f'metric.type = "{METRIC_TYPE_PREFIX}/{metric_name}"'


def build_query_url(
    base_url: str,
    project_id: str,
    filter_str: str,
    start_time: str,
    end_time: str,
    page_token: Optional[str] = None,
) -> str:
  """Builds the ListTimeSeries URL with a percent-encoded query string.

  Args:
    base_url: Base URL of the v3 projects resource.
    project_id: The Google Cloud project ID.
    filter_str: A Cloud Monitoring filter, see `metric_filter`.
    start_time: The beginning of the time interval, e.g. 2023-07-22T08:00:00Z.
    end_time: The end of the time interval.
    page_token: The nextPageToken of the previous response, if any.

  Returns:
    The full request URL.
  """
  params = [
      ("filter", filter_str),
      ("interval.endTime", end_time),
      ("interval.startTime", start_time),
  ]
  if page_token:
    params.append(("pageToken", page_token))
  query = urlencode(params, quote_via=quote)
  return f"{base_url}/{project_id}/timeSeries?{query}"


def query_time_series(
    project_id: str,
    filter_str: str,
    start_time: str,
    end_time: str,
    access_token: str,
    base_url: str,
    timeout: Optional[float] = None,
    raise_on_error: bool = True,
) -> TimeSeriesPages:
  """Queries time series from Cloud Monitoring, following all result pages.

  Args:
    project_id: The Google Cloud project ID.
    filter_str: A Cloud Monitoring filter string that specifies which time
      series should be returned.
    start_time: The beginning of the time interval, as a `...Z` string.
    end_time: The end of the time interval, as a `...Z` string.
    access_token: Bearer token used in the Authorization header.
    base_url: Base URL of the v3 projects resource.
    timeout: Seconds to wait for each response.
    raise_on_error: If True, a non-200 response raises MonitoringApiError;
      otherwise its status and body are returned for inspection.

  Returns:
    A TimeSeriesPages with every `timeSeries` entry in page order.

  Raises:
    MonitoringApiError: If the API does not answer with 200 and
      raise_on_error is set.
    json.JSONDecodeError: If a response body is not valid JSON.
    requests.RequestException: If the request itself fails.
  """
  logging.info(
      f"Querying time series for project {project_id} with filter"
      f" [{filter_str}] from {start_time} to {end_time}"
  )
  headers = {
      "Accept": "*/*",
      "Authorization": f"Bearer {access_token}",
  }
  result = TimeSeriesPages(status=200, status_text="OK")
  page_token = None
  while True:
    url = build_query_url(
        base_url, project_id, filter_str, start_time, end_time, page_token
    )
    response = requests.get(url, headers=headers, timeout=timeout)
    result.status = response.status_code
    result.status_text = response.reason

    if response.status_code != 200:
      if response.status_code == 403:
        logging.warning(
            f"Monitoring API returned 403 for project {project_id}; billing"
            " may not be enabled."
        )
      else:
        logging.error(
            f"Monitoring API returned {response.status_code}: {response.text}"
        )
      if raise_on_error:
        raise MonitoringApiError(
            response.status_code, response.reason, response.text
        )
      result.body = response.text
      result.time_series = []
      return result

    content = json.loads(response.text)
    result.page_count += 1
    result.time_series.extend(content.get("timeSeries", []))
    page_token = content.get("nextPageToken")
    if not page_token:
      break

  logging.info(
      f"Fetched {len(result.time_series)} time series in"
      f" {result.page_count} page(s)."
  )
  return result
