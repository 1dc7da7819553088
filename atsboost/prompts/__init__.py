from .ats_prompts import ATS_SYSTEM_PROMPT, build_ats_analysis_prompt, build_deep_analysis_prompt

__all__ = ["ATS_SYSTEM_PROMPT", "build_ats_analysis_prompt", "build_deep_analysis_prompt"]
