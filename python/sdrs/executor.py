"""
Rule execution against the transfer job service.

Dataset rules become one-shot jobs moving an explicit list of time-bucketed
prefixes into the shadow bucket. Default and global rules become recurring
jobs that select by object age and skip every dataset governed by its own
rule. Reconciling a default rule recomputes its selection from the current
sibling rules and only touches the external job when something changed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sdrs.config import TransferConfig, get_config
from sdrs.exceptions import (
    InvalidRuleTypeError,
    JobNotFoundError,
    ProjectIdUnresolvableError,
    TooManyExclusionsError,
)
from sdrs.logging import get_logger, with_context
from sdrs.models import DatasetRule, DefaultRule, GlobalRule, RetentionJob
from sdrs.paths import get_bucket_name, get_dataset_path
from sdrs.prefixes import generate_time_prefixes, to_utc
from sdrs.transfer.models import ObjectConditions, retention_days_to_duration

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from sdrs.transfer.base import TransferClient

    Rule = DatasetRule | DefaultRule | GlobalRule

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_description(rule: Rule, timestamp: datetime) -> str:
    """
    Describe the job created for a rule at a given time.

    Rules without an id and version come from a user-triggered run and are
    identified by their storage name instead.
    """
    if rule.id is None and rule.version is None:
        return f"Rule User {rule.data_storage_name} {timestamp.isoformat()}"
    return f"Rule {rule.id} {rule.version} {timestamp.isoformat()}"


def is_same_prefix_list(
    old_list: Sequence[str] | None,
    new_list: Sequence[str] | None,
) -> bool:
    """
    Compare two prefix lists ignoring order.

    Two None values are equal; None never equals a list. Inputs are not
    modified.
    """
    if old_list is None and new_list is None:
        return True

    if old_list is None or new_list is None:
        return False

    if len(old_list) != len(new_list):
        return False

    return sorted(old_list) == sorted(new_list)


def build_retention_job(
    job_name: str,
    rule: Rule,
    project_id: str | None = None,
) -> RetentionJob:
    """
    Snapshot a rule's identity against an external job name.

    ``project_id`` overrides the rule's own project when the job was created
    in a project borrowed from a dataset rule.
    """
    return RetentionJob(
        name=job_name,
        retention_rule_id=rule.id,
        retention_rule_project_id=rule.project_id if project_id is None else project_id,
        retention_rule_data_storage_name=rule.data_storage_name,
        retention_rule_type=rule.type,
        retention_rule_version=rule.version,
    )


class RuleExecutor:
    """
    Executes retention rules by creating and updating transfer jobs.

    The executor keeps no per-call state. Concurrent executions for the
    same rule must be serialized by the caller.
    """

    def __init__(
        self,
        client: TransferClient,
        config: TransferConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            client: Transfer service client, shared across executions.
            config: Suffix, project and limit settings. Defaults to the
                ``transfer`` section of the loaded configuration.
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        self._client = client
        self._config = config or get_config().transfer
        self._clock = clock or _utc_now

    @property
    def config(self) -> TransferConfig:
        return self._config

    def _now(self) -> datetime:
        return to_utc(self._clock())

    def execute_dataset_rule(self, rule: Rule) -> RetentionJob:
        """
        Create a one-shot job moving a dataset's expired prefixes.

        The prefixes cover ``[now - lookback, now - retention period]``.

        Raises:
            InvalidRuleTypeError: If the rule is a global rule.
            InvalidRangeError: If the retention period exceeds the lookback.
            TransferServiceError: If the job cannot be created.
        """
        match rule:
            case GlobalRule():
                logger.error("invalid_rule_type", rule_type=rule.rule_type, operation="execute_dataset_rule")
                raise InvalidRuleTypeError.for_operation(rule.rule_type, "execute_dataset_rule")

        with with_context(rule_id=rule.id, rule_type=rule.rule_type):
            now = self._now()
            prefixes = generate_time_prefixes(
                rule.dataset_path,
                now - timedelta(days=self._config.lookback_in_days),
                now - timedelta(days=rule.retention_period_in_days),
            )

            source_bucket = get_bucket_name(rule.data_storage_name)
            destination_bucket = get_bucket_name(rule.data_storage_name, self._config.suffix)
            description = build_description(rule, now)

            logger.debug(
                "dataset_rule_job_creating",
                project_id=rule.project_id,
                description=description,
                source=source_bucket,
                destination=destination_bucket,
                prefix_count=len(prefixes),
            )

            job = self._client.create_include_job(
                rule.project_id,
                source_bucket,
                destination_bucket,
                prefixes,
                description,
                now,
            )

            logger.info("dataset_rule_job_created", job_name=job.name)
            return build_retention_job(job.name or "", rule)

    def execute_default_rule(
        self,
        rule: Rule,
        dataset_rules: Iterable[Rule],
        scheduled_time: datetime,
    ) -> RetentionJob:
        """
        Create a recurring job for a bucket-wide rule.

        Args:
            rule: The default or global rule.
            dataset_rules: Dataset rules in the same bucket; their datasets
                are excluded from the job.
            scheduled_time: Time of day and first date the job runs.

        Raises:
            InvalidRuleTypeError: If the rule is a dataset rule.
            TooManyExclusionsError: If there are too many dataset rules.
            ProjectIdUnresolvableError: If no project id can be found.
            TransferServiceError: If the job cannot be created.
        """
        match rule:
            case DatasetRule():
                logger.error("invalid_rule_type", rule_type=rule.rule_type, operation="execute_default_rule")
                raise InvalidRuleTypeError.for_operation(rule.rule_type, "execute_default_rule")

        dataset_rules = list(dataset_rules)
        with with_context(rule_id=rule.id, rule_type=rule.rule_type):
            scheduled_time = to_utc(scheduled_time)
            prefixes_to_exclude = self.build_exclude_prefix_list(dataset_rules)
            project_id = self.extract_project_id(rule, dataset_rules)
            source_bucket = get_bucket_name(rule.data_storage_name)
            destination_bucket = get_bucket_name(rule.data_storage_name, self._config.suffix)
            description = build_description(rule, scheduled_time)

            logger.debug(
                "default_rule_job_creating",
                project_id=project_id,
                description=description,
                source=source_bucket,
                destination=destination_bucket,
                exclusions=len(prefixes_to_exclude),
            )

            job = self._client.create_recurring_exclude_job(
                project_id,
                source_bucket,
                destination_bucket,
                prefixes_to_exclude,
                description,
                scheduled_time,
                rule.retention_period_in_days,
            )

            logger.info("default_rule_job_created", job_name=job.name)
            return build_retention_job(job.name or "", rule, project_id)

    def update_default_rule(
        self,
        existing_job: RetentionJob,
        rule: Rule,
        dataset_rules: Iterable[Rule],
    ) -> RetentionJob:
        """
        Reconcile the recurring job of a bucket-wide rule.

        The live job's age condition and exclusion list are compared with
        values recomputed from the rule and its current dataset rules. When
        both match, ``existing_job`` is returned and the service is not
        modified. Otherwise the job's object conditions are replaced as a
        whole.

        Raises:
            InvalidRuleTypeError: If the rule is a dataset rule.
            JobNotFoundError: If the service no longer has the job.
            TooManyExclusionsError: If there are too many dataset rules.
            TransferServiceError: If a service call fails.
        """
        match rule:
            case DatasetRule():
                logger.error("invalid_rule_type", rule_type=rule.rule_type, operation="update_default_rule")
                raise InvalidRuleTypeError.for_operation(rule.rule_type, "update_default_rule")

        dataset_rules = list(dataset_rules)
        with with_context(rule_id=rule.id, rule_type=rule.rule_type, job_name=existing_job.name):
            live_job = self._client.get_job(
                existing_job.retention_rule_project_id, existing_job.name
            )
            if live_job is None:
                logger.error(
                    "transfer_job_not_found",
                    project_id=existing_job.retention_rule_project_id,
                )
                raise JobNotFoundError.missing(
                    existing_job.name, existing_job.retention_rule_project_id
                )

            conditions = live_job.object_conditions

            updated_retention = retention_days_to_duration(rule.retention_period_in_days)
            retention_changed = (
                conditions.min_time_elapsed_since_last_modification != updated_retention
            )

            updated_excludes = self.build_exclude_prefix_list(dataset_rules)
            # An absent live exclude list counts as empty here.
            excludes_changed = not is_same_prefix_list(
                list(conditions.exclude_prefixes or ()), updated_excludes
            )

            if not (retention_changed or excludes_changed):
                logger.info("default_rule_update_skipped")
                return existing_job

            new_conditions = ObjectConditions(
                include_prefixes=conditions.include_prefixes,
                exclude_prefixes=tuple(updated_excludes) or None,
                min_time_elapsed_since_last_modification=updated_retention,
            )
            updated_job = live_job.model_copy(
                update={
                    "description": build_description(rule, self._now()),
                    "transfer_spec": live_job.transfer_spec.model_copy(
                        update={"object_conditions": new_conditions}
                    ),
                }
            )

            logger.info(
                "default_rule_job_updating",
                retention_changed=retention_changed,
                excludes_changed=excludes_changed,
                exclusions=len(updated_excludes),
            )

            returned_job = self._client.update_job(updated_job)
            return build_retention_job(
                returned_job.name or existing_job.name,
                rule,
                existing_job.retention_rule_project_id,
            )

    def build_exclude_prefix_list(self, dataset_rules: Iterable[Rule]) -> list[str]:
        """
        Collect the dataset paths a bucket-wide job must skip.

        Each dataset rule already runs its own job, so its whole dataset path
        is excluded rather than a generated prefix set. Rules without a
        dataset path are skipped.

        Raises:
            TooManyExclusionsError: If the list exceeds ``max_prefix_count``.
        """
        prefixes_to_exclude = [
            path
            for path in (get_dataset_path(r.data_storage_name) for r in dataset_rules)
            if path
        ]

        if len(prefixes_to_exclude) > self._config.max_prefix_count:
            logger.error(
                "too_many_exclusions",
                count=len(prefixes_to_exclude),
                limit=self._config.max_prefix_count,
            )
            raise TooManyExclusionsError.limit_exceeded(
                len(prefixes_to_exclude), self._config.max_prefix_count
            )

        return prefixes_to_exclude

    def extract_project_id(self, rule: Rule, dataset_rules: Iterable[Rule]) -> str:
        """
        Resolve the project a bucket-wide job runs in.

        A rule with no project, or with the default project id, borrows the
        project of the first dataset rule that has one.

        Raises:
            ProjectIdUnresolvableError: If no dataset rule has a project id.
        """
        project_id = rule.project_id
        if project_id and project_id.lower() != self._config.default_project_id.lower():
            return project_id

        dataset_rules = list(dataset_rules)
        for dataset_rule in dataset_rules:
            if dataset_rule.project_id:
                return dataset_rule.project_id

        logger.error("project_id_unresolvable", sibling_count=len(dataset_rules))
        raise ProjectIdUnresolvableError.no_project(rule.id, len(dataset_rules))
