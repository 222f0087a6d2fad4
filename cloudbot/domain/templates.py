"""Template identity.

A scenario's ``template_ref`` (e.g. ``aliyun/ecs`` or
``aliyun/aliyun-proxy/zone-node/ss-libev-node-bj``) is parsed once, when the
scenario is created, into a :data:`TemplateKind`. Everything downstream
switches on the variant instead of inspecting the string again.
"""

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# Suffixes used by region-scoped proxy templates.
REGION_SUFFIXES: dict[str, str] = {
    "bj": "cn-beijing",
    "sh": "cn-shanghai",
    "hhht": "cn-huhehaote",
    "wlcb": "cn-wulanchabu",
    "zjk": "cn-zhangjiakou",
}

_REGION_SCOPED = re.compile(
    r"^(?P<provider>[^/]+)/[^/]*proxy[^/]*/zone-node/[^/]*-node-(?P<suffix>[a-z0-9-]+)$"
)
_TASK_EXECUTOR = re.compile(r"(^|/)task-executor")
_PROXY = re.compile(r"(^|/)[^/]*-proxy")


class StandardProvisioning(BaseModel):
    """Plain compute template for one provider."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["standard"] = "standard"
    provider: str
    node_scaled: bool = Field(
        default=False,
        description="Template accepts a node_count variable",
    )


class RegionScopedProxy(BaseModel):
    """Proxy template whose region is fixed by the template itself."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["region_scoped_proxy"] = "region_scoped_proxy"
    provider: str
    region: str
    node_scaled: bool = True


class TaskExecutor(BaseModel):
    """Template that runs a program staged in object storage."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["task_executor"] = "task_executor"
    provider: str
    node_scaled: bool = False


AnyTemplateKind = StandardProvisioning | RegionScopedProxy | TaskExecutor

TemplateKind = Annotated[
    AnyTemplateKind,
    Field(discriminator="kind"),
]


def parse_template_ref(template_ref: str) -> AnyTemplateKind:
    """Resolve a template reference into its TemplateKind variant.

    Unknown shapes fall back to StandardProvisioning for the first path
    segment, so parsing never fails.

    Args:
        template_ref: Path-like reference such as ``aliyun/ecs``

    Returns:
        The matching TemplateKind variant
    """
    ref = template_ref.strip().strip("/")
    provider = ref.split("/", 1)[0].lower()

    match = _REGION_SCOPED.match(ref)
    if match:
        suffix = match.group("suffix")
        return RegionScopedProxy(
            provider=match.group("provider").lower(),
            region=REGION_SUFFIXES.get(suffix, suffix),
        )

    if _TASK_EXECUTOR.search(ref):
        return TaskExecutor(provider=provider)

    return StandardProvisioning(provider=provider, node_scaled=bool(_PROXY.search(ref)))
