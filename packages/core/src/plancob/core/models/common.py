"""公共类型 -- 标识符与嵌入内容

所有 ID 都是十六进制 git 对象 ID（SHA-1 40 位或 SHA-256 64 位），
统一规范化为小写。TaskId / CommentId 等于创建它们的 operation ID。
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

Oid = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        to_lower=True,
        pattern=r"^(?:[0-9a-fA-F]{40}|[0-9a-fA-F]{64})$",
    ),
]

OperationId = Oid
TaskId = Oid
CommentId = Oid
ObjectId = Oid
CommitHash = Oid

Identity = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Embed(BaseModel):
    """嵌入内容（附件），content 为 URI"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="附件名称")
    content: str = Field(description="内容 URI")
