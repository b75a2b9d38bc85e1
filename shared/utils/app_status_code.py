class AppStatusCode:
    # -- success
    DATA_RETRIEVED_SUCCESSFULLY = "200"
    OPERATION_SUCCESSFUL = "201"

    # -- generic failures
    OPERATION_FAILED = "100"
    OPERATION_ERROR = "101"
    INVALID_INPUT = "102"
    REQUIRED_VALIDATION_ERROR = "103"
    DUPLICATE_ADD_ERROR = "104"
    UNAUTHORIZED_ACTION = "105"
    RECORD_NOT_FOUND = "106"

    # -- authentication
    AUTHENTICATION_TOKEN_INVALID = "110"
    AUTHENTICATION_TOKEN_EXPIRED = "111"
    AUTHENTICATION_USER_INVALID = "112"
    AUTHENTICATION_USER_INACTIVE = "113"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "114"

    # -- bookings
    BOOKING_CONFLICT = "120"
    BOOKING_INVALID_STATE = "121"

    # -- payments / wallet
    WALLET_INSUFFICIENT_FUNDS = "131"
