"""
Prompt assembly for section generation.

Renders a ``SectionContext`` into chat messages: a fixed system instruction
and one user message carrying the section brief, the numbered source block
and the writing requirements.
"""

from typing import Dict, List, Sequence

from ..core.config import SOURCE_BODY_MAX_CHARS
from ..models.sections import RetrievedSource, SectionContext

SYSTEM_PROMPT = (
    "你是企业内宣/党务/政研的新闻稿智能体，负责串联分段播报。"
    "确保内容可直接用于班前会或晨会。"
)

NO_SOURCES_TEXT = "未检索到最新素材，可结合默认提示词生成概览。"

WRITING_REQUIREMENTS = (
    "- 输出中文，语气为内部播报/主持口吻，段落精炼。",
    "- 结合资料进行编排，先给一句主题句，再给要点清单，优先引用最新素材。",
    "- 给出与公司战略、属地经营或廉政学习的关联。",
    "- 在文末列出引用的来源索引，格式为 [编号] 标题（URL）。",
)

Message = Dict[str, str]


def format_duration(minutes: float) -> str:
    return str(int(minutes)) if float(minutes).is_integer() else str(minutes)


def render_source(index: int, source: RetrievedSource, body_limit: int = SOURCE_BODY_MAX_CHARS) -> str:
    body = (source.content or "")[:body_limit]
    lines = [
        f"({index}) 标题：{source.title}",
        f"来源：{source.origin}" if source.origin else "",
        f"链接：{source.url}",
        f"摘要：{source.snippet}" if source.snippet else "",
        f"正文节选：{body}" if body else "",
    ]
    return "\n".join(line for line in lines if line)


def build_context_text(sources: Sequence[RetrievedSource]) -> str:
    if not sources:
        return NO_SOURCES_TEXT
    return "\n\n".join(render_source(i, source) for i, source in enumerate(sources, start=1))


def build_prompt_payload(ctx: SectionContext) -> List[Message]:
    runtime = ctx.runtime
    content = "\n".join(
        [
            f"板块：{runtime.template.title}",
            f"目标时长：{format_duration(runtime.duration_minutes)} 分钟（约 {runtime.target_words} 字）",
            f"用户提示词：{runtime.prompt}",
            "资料：",
            build_context_text(ctx.sources),
            "写作要求：",
            *WRITING_REQUIREMENTS,
        ]
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]
