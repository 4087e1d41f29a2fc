"""Entry point for running the reminders API as a module.

Allows running with: python -m study_reminders.api
"""

from study_reminders.api.server import main

if __name__ == "__main__":
    main()
