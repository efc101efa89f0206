from . import crud_user, crud_form, crud_question, crud_response  # noqa: F401
