from .command_service import CommandService, Invocation
from .permission_service import CallerContext, authorize
from .process_service import ProcessService
from .query_service import QueryService

__all__ = ['CallerContext', 'CommandService', 'Invocation', 'ProcessService',
'QueryService', 'authorize']
