"""Pydantic schemas for farm activity records and reminders."""

from __future__ import annotations

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field, computed_field, field_validator

from orchard.models.enums import ActivityTypeEnum, PendingStatusEnum, ReminderBucketEnum


class PendingAction(BaseModel):
	action_text: str = Field(min_length=1, max_length=500)
	due_date: date | None = None
	status: PendingStatusEnum = PendingStatusEnum.pending


class ActivityRecord(BaseModel):
	"""A farming action already logged by the activity collaborator."""

	id: str | None = None
	date: datetime
	type: ActivityTypeEnum
	plot_id: str = Field(min_length=1)
	notes: str = ""
	pending_action: PendingAction | None = None

	@field_validator("date")
	@classmethod
	def _assume_utc(cls, value: datetime) -> datetime:
		# date-only and offset-less timestamps are read as UTC
		return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class ActivityContext(BaseModel):
	date: datetime
	type: ActivityTypeEnum
	notes: str = ""


class PendingTask(BaseModel):
	activity_id: str | None = None
	origin_type: ActivityTypeEnum
	logged_at: datetime
	action_text: str
	due_date: date | None = None
	notes: str = ""


class ReminderItem(BaseModel):
	plot_id: str
	bucket: ReminderBucketEnum
	task: PendingTask


class ReminderDigest(BaseModel):
	today: date
	overdue: list[ReminderItem] = Field(default_factory=list)
	due_today: list[ReminderItem] = Field(default_factory=list)
	upcoming: list[ReminderItem] = Field(default_factory=list)
	unscheduled: list[ReminderItem] = Field(default_factory=list)

	@computed_field
	@property
	def total(self) -> int:
		return len(self.overdue) + len(self.due_today) + len(self.upcoming) + len(self.unscheduled)
