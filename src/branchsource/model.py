import io
from pathlib import Path
from typing import List, Optional, Union

import pydantic
import yaml

from branchsource.scm.types import CheckoutStrategy, Origin


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True
    )


class BuildPolicy(Model):
    build_origin_pr_head: bool = pydantic.Field(False, alias="build-origin-pr-head")
    build_origin_pr_merge: bool = pydantic.Field(True, alias="build-origin-pr-merge")
    build_fork_pr_head: bool = pydantic.Field(True, alias="build-fork-pr-head")
    build_fork_pr_merge: bool = pydantic.Field(False, alias="build-fork-pr-merge")

    def builds(self, origin: Origin, strategy: CheckoutStrategy) -> bool:
        if origin == Origin.ORIGIN:
            if strategy == CheckoutStrategy.HEAD:
                return self.build_origin_pr_head
            return self.build_origin_pr_merge
        if strategy == CheckoutStrategy.HEAD:
            return self.build_fork_pr_head
        return self.build_fork_pr_merge

    def strategies(self, origin: Origin) -> List[CheckoutStrategy]:
        return [s for s in CheckoutStrategy if self.builds(origin, s)]


class InvalidPolicy(Exception):
    raw_config: str
    source: str

    def __init__(self, *args, **kwargs):
        self.raw_config = kwargs.pop("raw_config")
        self.source = kwargs.pop("source")
        super().__init__(*args, **kwargs)


def parse_policy(raw: str, source: str = "<string>") -> BuildPolicy:
    try:
        data = yaml.safe_load(io.StringIO(raw))
    except yaml.YAMLError as e:
        raise InvalidPolicy(str(e), raw_config=raw, source=source) from e
    try:
        return BuildPolicy() if data is None else BuildPolicy.model_validate(data)
    except pydantic.ValidationError as e:
        raise InvalidPolicy(str(e), raw_config=raw, source=source) from e


def load_policy(path: Optional[Union[str, Path]]) -> BuildPolicy:
    if path is None:
        return BuildPolicy()
    with open(path) as fh:
        return parse_policy(fh.read(), source=str(path))
