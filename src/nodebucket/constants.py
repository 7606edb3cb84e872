DATA_DIR_NAME = ".nodebucket"
EMPLOYEES_DIR = "employees"
CONFIG_FILE = "config.yaml"
DOCUMENT_SUFFIX = ".yaml"
LOCK_SUFFIX = ".lock"
WINDOWS_LOCK_BYTES = 4096
# Longest employee key that still fits in a document file name.
MAX_DOCUMENT_KEY_LENGTH = 200

TODO_LIST = "todo"
DONE_LIST = "done"
TASK_LISTS = (TODO_LIST, DONE_LIST)

ENV_DEVELOPMENT = "development"
ENV_PRODUCTION = "production"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CLIENT_TIMEOUT_SECONDS = 10.0
DEFAULT_CLIENT_WORKERS = 4

API_PREFIX = "/api"
TASK_ID_HEADER = "X-Task-Id"

# Employees provisioned by `nodebucket seed` when no file is given.
DEFAULT_EMPLOYEES = (
    {"empId": 1007, "firstName": "Dana", "lastName": "Holt"},
    {"empId": 1008, "firstName": "Ravi", "lastName": "Patel"},
    {"empId": 1009, "firstName": "Morgan", "lastName": "Lee"},
    {"empId": 1010, "firstName": "Sam", "lastName": "Ortiz"},
    {"empId": 1011, "firstName": "Jules", "lastName": "Baker"},
    {"empId": 1012, "firstName": "Kai", "lastName": "Nakamura"},
)
