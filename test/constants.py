# Test Utility Constants

# Secrets (exported to the environment by conftest before settings load)
TEST_PAYMENT_PROOF_SECRET = 'test-payment-proof-secret'
TEST_SECRET_KEY = 'test-platform-jwt-secret'

# Test Users
TEST_BUYER_ID = 101
ANOTHER_BUYER_ID = 102
TEST_STAFF_ID = 900
TEST_BUYER_NAME = 'Test Buyer'
TEST_STAFF_NAME = 'Gate Staff'

# Test Events
TEST_EVENT_ID = 1
TEST_EVENT_PRICE = 1500
