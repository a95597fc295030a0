"""Agronomic formula library — GDD, VPD, Hargreaves ETo, dew point.

Pure functions over scalar inputs. Invalid input raises AgronomyDomainError
instead of leaking NaN into reports.
"""

from __future__ import annotations

import math
from datetime import date

_TETENS_A = 0.6108
_TETENS_B = 17.27
_TETENS_C = 237.3

_MAGNUS_A = 17.27
_MAGNUS_B = 237.7

_SOLAR_CONSTANT = 0.0820  # MJ m-2 min-1
_HARGREAVES_COEFF = 0.0023
_HARGREAVES_OFFSET = 17.8

DEFAULT_BASE_TEMP = 10.0


class AgronomyDomainError(ValueError):
	"""Raised when a formula receives physically invalid input."""


def mean_temp(temp_max: float, temp_min: float) -> float:
	return (temp_max + temp_min) / 2


def day_of_year(day: date) -> int:
	return day.timetuple().tm_yday


def gdd(temp_max: float, temp_min: float, base_temp: float = DEFAULT_BASE_TEMP) -> float:
	"""Growing degree days for one day, floored at zero (unrounded)."""
	return max(0.0, mean_temp(temp_max, temp_min) - base_temp)


def saturation_vapor_pressure(temp: float) -> float:
	return _TETENS_A * math.exp((_TETENS_B * temp) / (temp + _TETENS_C))


def vpd(temp: float, relative_humidity: float) -> float:
	"""Vapor pressure deficit in kPa, rounded to 2 decimals."""
	_require_humidity(relative_humidity, allow_zero=True)
	svp = saturation_vapor_pressure(temp)
	avp = svp * (relative_humidity / 100)
	return round(svp - avp, 2)


def extraterrestrial_radiation(latitude_deg: float, day: date) -> float:
	"""Daily extraterrestrial radiation Ra in MJ m-2 day-1 (FAO-56 eq. 21)."""
	if not -90 <= latitude_deg <= 90:
		raise AgronomyDomainError(f"latitude {latitude_deg} outside [-90, 90]")

	angle = (2 * math.pi * day_of_year(day)) / 365
	inverse_distance = 1 + 0.033 * math.cos(angle)
	declination = 0.409 * math.sin(angle - 1.39)
	phi = math.radians(latitude_deg)

	# polar day / polar night: clamp so acos stays defined
	cos_ws = max(-1.0, min(1.0, -math.tan(phi) * math.tan(declination)))
	sunset_angle = math.acos(cos_ws)

	return (
		(24 * 60 / math.pi)
		* _SOLAR_CONSTANT
		* inverse_distance
		* (
			sunset_angle * math.sin(phi) * math.sin(declination)
			+ math.cos(phi) * math.cos(declination) * math.sin(sunset_angle)
		)
	)


def hargreaves_eto(temp_max: float, temp_min: float, latitude_deg: float, day: date) -> float:
	"""Reference evapotranspiration (mm/day) by Hargreaves, floored at 0.

	Raises AgronomyDomainError when ``temp_max < temp_min``: the diurnal range
	would make the square root undefined.
	"""
	if temp_max < temp_min:
		raise AgronomyDomainError(
			f"temp_max {temp_max} is below temp_min {temp_min} for {day.isoformat()}"
		)

	ra = extraterrestrial_radiation(latitude_deg, day)
	eto = (
		_HARGREAVES_COEFF
		* (mean_temp(temp_max, temp_min) + _HARGREAVES_OFFSET)
		* math.sqrt(temp_max - temp_min)
		* ra
	)
	return max(0.0, round(eto, 2))


def dew_point(temp: float, relative_humidity: float) -> float:
	"""Dew point (°C) by the Magnus formula, rounded to 1 decimal."""
	_require_humidity(relative_humidity, allow_zero=False)
	alpha = (_MAGNUS_A * temp) / (_MAGNUS_B + temp) + math.log(relative_humidity / 100)
	return round((_MAGNUS_B * alpha) / (_MAGNUS_A - alpha), 1)


def _require_humidity(relative_humidity: float, *, allow_zero: bool) -> None:
	lower_ok = relative_humidity >= 0 if allow_zero else relative_humidity > 0
	if not lower_ok or relative_humidity > 100 or math.isnan(relative_humidity):
		bound = "[0, 100]" if allow_zero else "(0, 100]"
		raise AgronomyDomainError(f"relative humidity {relative_humidity} outside {bound}")
