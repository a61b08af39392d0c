"""
Service context for log lines.

Identifies which process of which deployment wrote a log line, so interleaved logs
from several workers contending for the same event's seats can be told apart.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'ticketing-core')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname when running in a pod, PID otherwise
    instance = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
