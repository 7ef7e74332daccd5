from typing import List, Sequence, Tuple

from ..models.answer import Answer, QuestionAnswer
from .base import GatewayResult, TableRepository


class AnswerRepository(TableRepository):
    table_name = "answers"

    def create_with_links(
        self,
        question_id: str,
        options: Sequence[Tuple[str, bool]],
    ) -> GatewayResult[List[QuestionAnswer]]:
        """Insert one answer row per option and bind each to the question.

        Answers and join rows are committed together; on failure neither is kept.
        """
        def _insert() -> List[QuestionAnswer]:
            answers = [Answer(answer=text, is_correct=is_correct) for text, is_correct in options]
            self.session.add_all(answers)
            self.session.flush()

            links = [QuestionAnswer(question_id=question_id, answer_id=answer.id) for answer in answers]
            self.session.add_all(links)
            self.session.commit()
            for link in links:
                self.session.refresh(link)
            return links

        return self._run("insert", _insert)
