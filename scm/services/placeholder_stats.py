"""Fixed figures served to the chart placeholders; not read from the database."""

JOB_STATUS = [
    {'job_title': 'Warehouse Worker', 'count': 12},
    {'job_title': 'Supervisor', 'count': 5},
    {'job_title': 'Driver', 'count': 8},
]

ORDER_RETURNS = [
    {'type': 'Orders', 'value': 120},
    {'type': 'Returns', 'value': 15},
]

PO_STATUS = [
    {'status': 'Received', 'value': 80},
    {'status': 'In Transit', 'value': 25},
    {'status': 'Pending', 'value': 10},
]
