import datetime as dt

import pandas as pd


class TimeUtils:
    # Monday = 0, matching pandas' Timestamp.weekday()
    WEEK_START = 0

    @staticmethod
    def today(now=None):
        """Return the evaluation instant normalized to local midnight.

        Args:
            now (str or datetime, optional): Simulated "now". Defaults to the wall clock.

        Returns:
            pd.Timestamp: Midnight of the given (or current) day
        """
        if now is None:
            return pd.Timestamp.today().normalize()
        return pd.to_datetime(now).normalize()

    @staticmethod
    def parse_day(value):
        """Parse a single cell into a midnight Timestamp.

        Strings are read from their ``YYYY-MM-DD`` prefix (anything after a
        ``T`` is ignored), native dates are truncated to the day.

        Args:
            value: str, date, datetime or Timestamp

        Returns:
            tuple: (Timestamp or NaT, bool) where the bool is True when the value
                   was present but could not be parsed
        """
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return pd.NaT, False
        if isinstance(value, (pd.Timestamp, dt.datetime, dt.date)):
            stamp = pd.Timestamp(value)
            if stamp.tzinfo is not None:
                stamp = stamp.tz_localize(None)
            return stamp.normalize(), False

        text = str(value).strip()
        if not text:
            return pd.NaT, False
        parsed = pd.to_datetime(text.split("T")[0].split(" ")[0], format="%Y-%m-%d", errors="coerce")
        if pd.isna(parsed):
            return pd.NaT, True
        return parsed, False

    @staticmethod
    def parse_days(series, fallback):
        """Parse a column of date cells, replacing unparseable ones with ``fallback``.

        Args:
            series (pd.Series): Raw date cells
            fallback (pd.Timestamp): Value used for cells that are present but unparseable

        Returns:
            tuple: (datetime64 Series, boolean Series flagging the fallback cells)
        """
        parsed = series.map(TimeUtils.parse_day)
        days = pd.to_datetime(parsed.map(lambda p: p[0]))
        failed = parsed.map(lambda p: p[1]).astype(bool)
        days = days.mask(failed, fallback)
        return days, failed

    @staticmethod
    def week_bounds(date):
        """Monday-start week containing ``date``.

        Returns:
            tuple: (monday, sunday) as midnight Timestamps
        """
        date = pd.to_datetime(date).normalize()
        start = date - pd.Timedelta(days=(date.weekday() - TimeUtils.WEEK_START) % 7)
        return start, start + pd.Timedelta(days=6)

    @staticmethod
    def end_of_week(date):
        """Sunday closing the Monday-start week that contains ``date``."""
        return TimeUtils.week_bounds(date)[1]

    @staticmethod
    def week_start_series(dates):
        """Vectorised Monday of the week for a datetime Series."""
        return dates - pd.to_timedelta((dates.dt.weekday - TimeUtils.WEEK_START) % 7, unit="D")

    @staticmethod
    def week_label(start, end):
        """Bucket key used by the weekly views, e.g. ``2024-03-11 ~ 2024-03-17``."""
        return f"{start:%Y-%m-%d} ~ {end:%Y-%m-%d}"

    @staticmethod
    def month_key(dates):
        """``YYYY-MM`` key for a datetime Series."""
        return dates.dt.strftime("%Y-%m")

