"""Pending-task reminders bucketed against the engine's local today."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

from orchard.models.enums import ReminderBucketEnum
from orchard.schemas.activity import PendingTask, ReminderDigest, ReminderItem


def classify_task(task: PendingTask, today: date) -> ReminderBucketEnum:
	if task.due_date is None:
		return ReminderBucketEnum.unscheduled
	if task.due_date < today:
		return ReminderBucketEnum.overdue
	if task.due_date == today:
		return ReminderBucketEnum.today
	return ReminderBucketEnum.upcoming


def build_digest(tasks_by_plot: Mapping[str, Sequence[PendingTask]], today: date) -> ReminderDigest:
	"""Group pending tasks by urgency; dated buckets are ordered by due date."""
	digest = ReminderDigest(today=today)
	buckets = {
		ReminderBucketEnum.overdue: digest.overdue,
		ReminderBucketEnum.today: digest.due_today,
		ReminderBucketEnum.upcoming: digest.upcoming,
		ReminderBucketEnum.unscheduled: digest.unscheduled,
	}
	for plot_id in sorted(tasks_by_plot):
		for task in tasks_by_plot[plot_id]:
			bucket = classify_task(task, today)
			buckets[bucket].append(ReminderItem(plot_id=plot_id, bucket=bucket, task=task))

	for items in (digest.overdue, digest.due_today, digest.upcoming):
		items.sort(key=lambda item: (item.task.due_date, item.plot_id))
	return digest
