"""
Journey-based integration tests for the user-management API.

Journeys run in file order and build on each other through the
``session_context`` fixture: tokens captured in 01 authenticate every later
step, the user registered in 02 is updated in 04 and deleted in 09, the role
created in 03 is assigned in 04 and deleted in 06.

Journey Order:
    00 - Auth enforcement (protected routes reject missing/invalid tokens)
    01 - Login (valid, invalid, missing fields, profile info)
    02 - Registration (valid, missing fields, weak password)
    03 - Roles (create, invalid permissions)
    04 - User updates (assign role, unknown user)
    05 - Listing (paginated users and roles)
    06 - Role deletion (captured role, unknown role)
    07 - Token refresh
    08 - Export (CSV header)
    09 - User deletion (captured user, unknown user)
"""
