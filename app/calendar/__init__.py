from app.calendar.engine import CalendarRuleEngine

__all__ = ["CalendarRuleEngine"]
