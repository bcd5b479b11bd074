"""
covid_snapshot - latest COVID-19 figures for one country, fetched from the
Johns Hopkins CSSE time series and rendered into named display elements.
"""
