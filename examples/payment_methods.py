"""
Payment methods only exist in API version 2021-11.

A client configured for 2021-01 can still use them: the resource switches to
2021-11 for each call and puts the caller's version back afterwards, even
when the call fails.
"""

import sys

from rechantic import ApiVersion, NotFoundError, RechargeClient

customer_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1

with RechargeClient.from_env() as client:
    client.api_version = ApiVersion.V2021_01

    methods = client.payment_methods.list({"customer_id": customer_id})
    print(f"Client version after list(): {client.api_version.value}")  # still 2021-01

    for method in methods:
        wallet = " (wallet)" if method.payment_type and method.payment_type.is_digital_wallet() else ""
        print(f"  {method.id}: {method.payment_type}{wallet} default={method.default}")

    try:
        client.payment_methods.get(999_999_999)
    except NotFoundError as e:
        print(f"\nLookup failed with {e.status_code}: {e.message}")
    print(f"Client version after the error: {client.api_version.value}")

    # Operations that only exist in 2021-11 need an explicit switch
    with client.use_version(ApiVersion.V2021_11):
        deliveries = client.customers.delivery_schedule(customer_id)
    print(f"\nUpcoming deliveries: {len(deliveries)}")
