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

"""Utilities to turn Cloud Monitoring time series into simple count records."""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from absl import logging

from firestore_metrics.apis.metric_config import DedupPolicy, Interval, TimeIntervalMetric


UNKNOWN_LABEL_VALUE = "__unknown__"


def clean_labels(labels: Optional[Mapping[str, Any]]) -> Dict[str, str]:
  """Drops labels that carry no information.

  Cloud Monitoring fills labels it could not resolve (e.g. `module` and
  `version`) with "__unknown__".

  Args:
    labels: The `metric.labels` mapping of a time series, may be None.

  Returns:
    A new dict without "__unknown__", empty or null values.
  """
  if not labels:
    return {}
  return {
      key: str(value)
      for key, value in labels.items()
      if value is not None and value not in ("", UNKNOWN_LABEL_VALUE)
  }


def _dedup_key(record: TimeIntervalMetric, dedup_policy: DedupPolicy):
  if dedup_policy == DedupPolicy.START_TIME:
    return record.interval.start_time
  return (
      record.interval,
      tuple(sorted(record.labels.items())),
      record.count,
  )


def clean_time_series(
    time_series: Iterable[Mapping[str, Any]],
    dedup_policy: DedupPolicy = DedupPolicy.STRUCTURAL,
) -> List[TimeIntervalMetric]:
  """Flattens decoded time series into non-zero, deduplicated records.

  Records keep the traversal order of the input: series first, then points
  within a series.

  Args:
    time_series: Decoded `timeSeries` entries, possibly gathered from several
      response pages.
    dedup_policy: How duplicate records are detected.

  Returns:
    A list of TimeIntervalMetric.

  Raises:
    ValueError: If a point count is not a decimal integer.
  """
  records = []
  seen_keys = set()
  for series in time_series:
    labels = clean_labels(series.get("metric", {}).get("labels"))
    for point in series.get("points", []):
      raw_count = point.get("value", {}).get("int64Value")
      if raw_count is None:
        logging.warning(f"Skipping point without int64Value: {point}")
        continue
      count = int(raw_count)
      if count == 0:
        continue

      record = TimeIntervalMetric(
          interval=Interval.from_dict(point.get("interval", {})),
          count=count,
          labels=dict(labels),
      )
      key = _dedup_key(record, dedup_policy)
      if key in seen_keys:
        continue
      records.append(record)
      seen_keys.add(key)

  return records


def clean_response_time_series(
    response_text: str,
    dedup_policy: DedupPolicy = DedupPolicy.STRUCTURAL,
) -> List[TimeIntervalMetric]:
  """Cleans a raw ListTimeSeries response body into count records.

  Args:
    response_text: The JSON body returned by the timeSeries endpoint.
    dedup_policy: How duplicate records are detected.

  Returns:
    A list of TimeIntervalMetric, empty when the response has no
    `timeSeries`, which is how the API reports an empty range.

  Raises:
    json.JSONDecodeError: If the body is not valid JSON.
  """
  response = json.loads(response_text)
  if "timeSeries" not in response:
    return []
  return clean_time_series(response["timeSeries"], dedup_policy)
