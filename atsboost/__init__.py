"""ATSBoost API: CV upload, ATS scoring and subscriptions for South African job seekers."""

__version__ = "1.0.0"
