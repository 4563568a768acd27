# Tool
STATUS_PATH = "/status"
HELLO_PATH = "/hello"
AUTHED_HELLO_PATH = "/authedHello"
V0_GET_BALANCE_PATH = "/v0/get_balance"

# Markets
V1_MARKETS_PATH = "/v1/markets"

# Spot trading
V1_SPOT_ORDERS_PATH = "/v1/orders"
V1_SPOT_INDIVIDUAL_ORDERS_PATH = "/v1/orders/:orderID"
V1_SPOT_ORDERS_CSV_PATH = "/v1/orders/csv"

V1_SPOT_FILLS_PATH = "/v1/fills"
V1_SPOT_FILLS_BY_ORDER_ID_PATH = "/v1/orders/:orderID/fills"
V1_SPOT_FILLS_CSV_PATH = "/v1/fills/csv"

V1_SPOT_DEPTH_PATH = "/v1/depth"

V1_SPOT_CLIENT_ORDER_ID_PREFIX = "client:"
ORDER_ID_PARAM = ":orderID"
