"""
covid_snapshot - Main entry point.

Runs one dashboard update (same as actions/update_dashboard.py): fetch the
three datasets and print the latest figures for the configured country.
"""

from actions.update_dashboard import main


if __name__ == "__main__":
    main()
