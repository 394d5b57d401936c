"""Route paths of the admin console. Must stay identical to the router table."""

DASHBOARD = '/dashboard'

REPORT_LIST = '/report'
REPORT_CREATE = '/report/create'
REPORT_EDIT_BY_PATH = '/report/edit/:id'
REPORT_EDIT_ALTERNATE = '/report/:id/edit'

TBM_LIST = '/tbm'
TBM_CREATE = '/tbm/create'

WORKLOAD = '/workload'

EXPENSE_PERSONAL = '/expense'
EXPENSE_TEAM = '/expense/member'

VACATION = '/vacation'
MEMBERS = '/members'
VEHICLES = '/vehicles'
