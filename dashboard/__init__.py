"""
Terminal dashboard for the company registry: a paginated, filterable,
sortable company table with summary cards, fed by the REST API or by an
exported file.
"""
