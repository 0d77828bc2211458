from typing import Optional

from models.dynamodb import DynamoDBItem


class UserItem(DynamoDBItem):
    """
    Identity record, keyed USER#{user_id} / USER#{user_id}.

    Created lazily on the first authenticated request and never deleted.
    """

    user_id: str
    email: str
    name: Optional[str] = None
