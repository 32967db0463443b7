"""
AI calendar generator: turns LLM-generated event lists into iCalendar files
and a browsable HTML page.
"""
