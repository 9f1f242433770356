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

"""Client to query Firestore usage metrics from Cloud Monitoring."""

from typing import Any, List, Mapping, Optional, Union

from absl import logging

from firestore_metrics.apis import gcp_config
from firestore_metrics.apis.metric_config import DedupPolicy, FirestoreMetric, MetricsResponse, TimeIntervalMetric
from firestore_metrics.utils import auth, monitoring, normalizer
from firestore_metrics.utils.time_util import TimeLike, time_range


MetricResult = Union[List[TimeIntervalMetric], MetricsResponse]


class FirestoreMetrics:
  """Queries Firestore metrics of one project.

  The access token and project id are cached on the instance. A token is only
  fetched when none is cached or the cached one has expired, unless
  `refresh_token` or `generate_token(overwrite_existing=True)` is called.

  Example:
    metrics = FirestoreMetrics(key_filename="/path/to/sa.json")
    reads = metrics.get_read_count("2023-07-22T08:00:00Z", "2023-07-22T22:42:15Z")
  """

  def __init__(
      self,
      config: Optional[gcp_config.GCPConfig] = None,
      *,
      project_id: Optional[str] = None,
      key_filename: Optional[str] = None,
      key_file: Optional[str] = None,
      credentials: Optional[Mapping[str, Any]] = None,
      base_url: str = gcp_config.MONITORING_BASE_URL,
      dedup_policy: DedupPolicy = DedupPolicy.STRUCTURAL,
  ):
    if config is None:
      config = gcp_config.GCPConfig(
          project_id=project_id,
          key_filename=key_filename,
          key_file=key_file,
          credentials=credentials,
          base_url=base_url,
      )
    self.config = config
    self.dedup_policy = dedup_policy
    self.project_id: Optional[str] = config.project_id
    self.access_token: Optional[str] = None
    self._credentials = None
    self._credentials_project_id: Optional[str] = None

  def _load_credentials(self):
    if self._credentials is None:
      self._credentials, self._credentials_project_id = auth.load_credentials(
          self.config
      )
    return self._credentials

  def get_project_id(self) -> str:
    """Returns the project id, resolving it from the credentials if unset."""
    if self.project_id:
      return self.project_id
    self._load_credentials()
    self.project_id = self._credentials_project_id or getattr(
        self._credentials, "project_id", None
    )
    if not self.project_id:
      raise ValueError(
          "No project id configured and none found in the credentials."
      )
    return self.project_id

  def _cached_token_expired(self) -> bool:
    # Tokens installed with set_access_token are never refreshed implicitly.
    if self._credentials is None:
      return False
    return (
        self.access_token == self._credentials.token
        and not self._credentials.valid
    )

  def generate_token(self, overwrite_existing: bool = True) -> str:
    """Generates an access token.

    Args:
      overwrite_existing: If True, replaces a cached token with a new one. A
        cached token that the credentials report as expired is replaced
        either way.

    Returns:
      The access token used to authenticate requests.
    """
    if (
        self.access_token is None
        or overwrite_existing
        or self._cached_token_expired()
    ):
      self.access_token = auth.fetch_access_token(self._load_credentials())

    # The project id is needed for every request URL.
    self.get_project_id()
    return self.access_token

  def refresh_token(self) -> str:
    return self.generate_token(overwrite_existing=True)

  def set_access_token(self, access_token: str) -> None:
    self.access_token = access_token

  def get_metric(
      self,
      metric: Union[FirestoreMetric, str],
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets the non-zero counts of a Firestore metric in a time range.

    Args:
      metric: A FirestoreMetric, or the metric name after
        "firestore.googleapis.com/", e.g. "document/read_count".
      start_time: The beginning of the time interval, a `...Z` string or a
        datetime.
      end_time: The end of the time interval.
      access_token: Pre-acquired access token. When None, a cached token is
        reused or a new one is generated.
      with_status: If True, returns a MetricsResponse carrying the HTTP status
        instead of raising on non-200 responses.

    Returns:
      A list of TimeIntervalMetric, or a MetricsResponse if with_status is set.

    Raises:
      ValueError: If the time range is invalid or no project id is known.
      monitoring.MonitoringApiError: If the API does not answer with 200 and
        with_status is not set.
    """
    metric_name = metric.value if isinstance(metric, FirestoreMetric) else metric
    start, end = time_range(start_time, end_time)

    if access_token is None:
      self.generate_token(overwrite_existing=False)
    else:
      self.set_access_token(access_token)

    pages = monitoring.query_time_series(
        project_id=self.get_project_id(),
        filter_str=monitoring.metric_filter(metric_name),
        start_time=start,
        end_time=end,
        access_token=self.access_token,
        base_url=self.config.base_url,
        timeout=self.config.timeout,
        raise_on_error=not with_status,
    )
    data = normalizer.clean_time_series(pages.time_series, self.dedup_policy)
    logging.info(f"{metric_name}: {len(data)} non-zero interval(s).")

    if with_status:
      return MetricsResponse(
          status=pages.status,
          status_text=pages.status_text,
          data=data,
          body=pages.body,
      )
    return data

  def get_read_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets Firestore document read counts."""
    return self.get_metric(
        FirestoreMetric.READ_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_write_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets Firestore document write counts."""
    return self.get_metric(
        FirestoreMetric.WRITE_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_delete_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets Firestore document delete counts."""
    return self.get_metric(
        FirestoreMetric.DELETE_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_snapshot_listeners(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets the number of active snapshot listeners."""
    return self.get_metric(
        FirestoreMetric.SNAPSHOT_LISTENERS,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_active_connections(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets the number of active connections."""
    return self.get_metric(
        FirestoreMetric.ACTIVE_CONNECTIONS,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_ttl_deletion_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets the number of documents deleted by TTL policies."""
    return self.get_metric(
        FirestoreMetric.TTL_DELETION_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_rules_evaluation_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets the number of security rule evaluations."""
    return self.get_metric(
        FirestoreMetric.RULES_EVALUATION_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )

  def get_request_count(
      self,
      start_time: TimeLike,
      end_time: TimeLike,
      access_token: Optional[str] = None,
      with_status: bool = False,
  ) -> MetricResult:
    """Gets Firestore API request counts."""
    return self.get_metric(
        FirestoreMetric.REQUEST_COUNT,
        start_time,
        end_time,
        access_token,
        with_status,
    )
