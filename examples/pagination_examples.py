"""
Example demonstrating cursor pagination in both API dialects.

2021-01 carries the next page token in the Link response header, 2021-11 in
the next_cursor body field. The Paginator hides the difference: the same loop
works against either version.

Run with RECHARGE_ACCESS_TOKEN set (RECHARGE_API_VERSION is optional).
"""

import logging

from rechantic import ApiVersion, ChargeSort, RechargeClient, SubscriptionStatus

logging.basicConfig(level=logging.INFO)

client = RechargeClient.from_env()

# 1. Lazy iteration: pages are fetched only when needed
print("Active subscriptions:")
for subscription in client.subscriptions.list({"status": "active"}, limit=50):
    print(f"  {subscription.id}: {subscription.product_title} x{subscription.quantity}")

# 2. Stop early: no page after the one holding the 10th charge is requested
charges = client.charges.list(sort_by=ChargeSort.SCHEDULED_AT_ASC, status="queued").take(10)
print(f"\nNext {len(charges)} queued charges:")
for charge in charges:
    print(f"  {charge.id} scheduled at {charge.scheduled_at}")

# 3. The same listing in the old dialect: statuses arrive in uppercase,
#    but map to the same enum members
with client.use_version(ApiVersion.V2021_01):
    paginator = client.subscriptions.list(limit=50)

cancelled = [s for s in paginator if s.status is SubscriptionStatus.CANCELLED]
print(f"\nCancelled subscriptions (fetched in 2021-01): {len(cancelled)}")
print(f"Pages requested: {paginator.fetch_count}")

# 4. Batches, e.g. for bulk exports
for batch in client.customers.list(limit=250).chunk(100):
    print(f"\nExporting {len(batch)} customers...")

# 5. Driving the cursor yourself (e.g. a web backend handing it to a frontend)
page = client.subscriptions.list(limit=25).page()
print(f"\nFirst page: {page.count} subscriptions, more: {page.has_more}")
if page.has_more:
    second = client.subscriptions.list(limit=25).page(page.cursor)
    print(f"Second page: {second.count} subscriptions")

client.close()
