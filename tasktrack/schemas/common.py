from pydantic import BeforeValidator
from typing import Annotated

# Ids are integers in the database and strings everywhere else
StrId = Annotated[str, BeforeValidator(lambda v: v if v is None else str(v))]
