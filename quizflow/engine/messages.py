"""
User-facing message catalogs for the emitted and headless runtimes
"""

from typing import Dict, Optional

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "progress": "Question {current} of {total}",
        "points": "Points",
        "correct": "Correct!",
        "incorrect": "Incorrect",
        "lead_title": "Enter your details",
        "lead_name": "Name",
        "lead_email": "Email",
        "lead_phone": "Phone",
        "lead_name_placeholder": "Enter your name",
        "lead_email_placeholder": "Enter your email",
        "lead_phone_placeholder": "Enter your phone",
        "lead_submit": "Start quiz",
        "lead_required_name": "Please enter your name",
        "lead_required_email": "Please enter your email",
        "lead_required_phone": "Please enter your phone",
        "lead_invalid_email": "Please enter a valid email",
        "results_title": "Quiz complete!",
        "final_score": "Your score:",
        "points_suffix": "points",
        "tier_top": "Excellent! You are a true expert!",
        "tier_second": "Great! A good result!",
        "tier_third": "Good! There is room to grow!",
        "tier_encouragement": "Don't give up! Try again!",
        "restart": "Start over",
        "match_title": "Connect the questions with the answers",
        "check": "Check",
        "clear": "Clear",
        "all_correct": "Excellent! All correct!",
        "partial": "Correct: {correct} of {total}",
        "time_up": "Time is up!",
    },
    "ru": {
        "progress": "Вопрос {current} из {total}",
        "points": "Баллы",
        "correct": "Правильно!",
        "incorrect": "Неправильно",
        "lead_title": "Введите ваши данные",
        "lead_name": "Имя",
        "lead_email": "Email",
        "lead_phone": "Телефон",
        "lead_name_placeholder": "Введите ваше имя",
        "lead_email_placeholder": "Введите ваш email",
        "lead_phone_placeholder": "Введите ваш телефон",
        "lead_submit": "Начать квиз",
        "lead_required_name": "Пожалуйста, введите ваше имя",
        "lead_required_email": "Пожалуйста, введите ваш email",
        "lead_required_phone": "Пожалуйста, введите ваш телефон",
        "lead_invalid_email": "Пожалуйста, введите корректный email",
        "results_title": "Квиз завершен!",
        "final_score": "Ваш результат:",
        "points_suffix": "баллов",
        "tier_top": "Превосходно! Вы настоящий эксперт!",
        "tier_second": "Отлично! Хороший результат!",
        "tier_third": "Хорошо! Есть куда расти!",
        "tier_encouragement": "Не расстраивайтесь! Попробуйте еще раз!",
        "restart": "Начать сначала",
        "match_title": "Соедините вопросы с ответами",
        "check": "Проверить",
        "clear": "Очистить",
        "all_correct": "Отлично! Все правильно!",
        "partial": "Правильно: {correct} из {total}",
        "time_up": "Время вышло!",
    },
}

DEFAULT_LOCALE = "en"


def get_messages(locale: Optional[str] = None) -> Dict[str, str]:
    """Message catalog for a locale, English when unknown"""
    return MESSAGES.get(locale or DEFAULT_LOCALE, MESSAGES[DEFAULT_LOCALE])
