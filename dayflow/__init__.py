"""DayFlow leave balance reservation and approval service."""
