"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8000/api"
USER_AGENT = "driverroute/python"
DEFAULT_REQUEST_TIMEOUT = 15.0

#: Key under which the last-used vehicle id is persisted.
SESSION_VEHICLE_KEY = "vehicleId"

MISSING_VEHICLE_ID_MESSAGE = "Please enter a vehicle ID"
