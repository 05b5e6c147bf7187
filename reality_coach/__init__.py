"""Career Reality Coach: adaptive yes/no career-fit questionnaire."""

__version__ = "0.1.0"
