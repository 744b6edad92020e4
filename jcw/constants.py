PRODUCT_NAME = "JCW"
DEFAULT_SERVICE_NAME = "%s service" % PRODUCT_NAME

DEFAULT_AGENT_HOST = "127.0.0.1"
DEFAULT_AGENT_PORT = 6831
DEFAULT_FLUSH_INTERVAL = 10

# Name of the flag set on patched modules and applications
PATCH_FLAG = "__jcw_patch"

COMPONENT = "jcw"
EVENT_TAG = "jcw.event"
