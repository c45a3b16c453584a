from __future__ import annotations

"""
Synthesis（汇总输出）：`AnalysisResult` -> PR 评论正文。

注意：
- 这里是**确定性输出**（不依赖 LLM）
- 标题、列表符号、emoji、加粗都是固定格式，GitHub 页面按这个布局渲染，不要随意改动
"""

from app.review.models import AnalysisResult
from app.review.models import CodeFeedback

COMMENT_TEMPLATE = (
    "## PR Analysis ✨\n"
    "\n"
    "* 🎯  **Main theme:** {main_theme}\n"
    "\n"
    "* 📝  **PR summary:** {summary}\n"
    "\n"
    "* 📌  **Type of PR:** {pr_type}\n"
    "\n"
    "* ⏱️  **Estimated effort to review [1-5]:** {effort_estimate}\n"
    "\n"
    "## PR Feedback 🧐\n"
    "\n"
    "* 💡  **General suggestions:** {general_suggestions}\n"
    "\n"
    "* 🤖  **Code feedback:**\n"
    "{code_feedback}\n"
)

CODE_FEEDBACK_TEMPLATE = (
    "  * **relevant file:** `{relevant_file}`\n"
    "\n"
    "    **relevant line:** `{relevant_line}`\n"
    "\n"
    "    **suggestion:** {suggestion}\n"
    "\n"
)


def format_code_feedback(feedback: CodeFeedback) -> str:
    return CODE_FEEDBACK_TEMPLATE.format(
        relevant_file=feedback.relevant_file,
        relevant_line=feedback.relevant_line,
        suggestion=feedback.suggestion,
    )


def format_review_comment(analysis: AnalysisResult) -> str:
    """按固定布局拼接评论；code feedback 保持解码时的顺序。"""
    code_feedback = "".join(format_code_feedback(feedback=f) for f in analysis.code_feedback)
    return COMMENT_TEMPLATE.format(
        main_theme=analysis.main_theme,
        summary=analysis.summary,
        pr_type=analysis.pr_type,
        effort_estimate=analysis.effort_estimate,
        general_suggestions=analysis.general_suggestions,
        code_feedback=code_feedback,
    )
