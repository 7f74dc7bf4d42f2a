class QuizError(Exception):
    """Base class for errors the HTTP layer maps to a status code."""
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class QuizValidationError(QuizError):
    status_code = 400


class NotFoundError(QuizError):
    status_code = 404


class SessionNotFound(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__("Session not found")
        self.session_id = session_id


class QuestionNotFound(NotFoundError):
    def __init__(self, question_id: str):
        super().__init__("Question not found")
        self.question_id = question_id


class QuizExhausted(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__("No more questions")
        self.session_id = session_id
