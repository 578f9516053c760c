"""
User-facing errors. Messages are shown as-is in the (Persian) UI.
"""

MSG_EMPTY_CONTENT = "لطفا متن یا آدرس اینترنتی را وارد کنید."
MSG_NO_QUESTIONS = "حداقل تعداد یک نوع سوال را مشخص کنید."
MSG_TOO_MANY_QUESTIONS = "مجموع سوالات نمی‌تواند بیشتر از ۴۰ باشد."
MSG_GENERATION_FAILED = "تولید آزمون ناموفق بود. محتوای دیگری را امتحان کنید."
MSG_REGENERATION_FAILED = "بازنویسی سوال ناموفق بود."
MSG_API_KEY_MISSING = "کلید API تنظیم نشده است."
MSG_UNKNOWN_ERROR = "خطایی رخ داده است."

MSG_UNSUPPORTED_FILE = "فقط فایل تصویر یا PDF پشتیبانی می‌شود."
MSG_FILE_TOO_LARGE = "حجم فایل بیش از حد مجاز است (حداکثر {max_mb} مگابایت)."
MSG_EMPTY_FILE = "فایل ارسال شده خالی است."
MSG_FILE_REQUIRED = "لطفا یک فایل تصویر یا PDF انتخاب کنید."
MSG_EXAM_NOT_FOUND = "آزمون مورد نظر پیدا نشد."
MSG_QUESTION_NOT_FOUND = "سوال مورد نظر پیدا نشد."
MSG_INVALID_EDIT = "مقدار وارد شده معتبر نیست."
MSG_INVALID_REQUEST = "اطلاعات ارسال شده معتبر نیست."
MSG_PDF_EXPORT_FAILED = "ساخت فایل PDF ناموفق بود."
MSG_NO_SAVED_CONFIG = "هیچ تنظیماتی ذخیره نشده است."
MSG_CONFIG_SAVE_FAILED = "خطا در ذخیره تنظیمات."


class ExamGeniusError(Exception):
    """Base error carrying a message suitable for the UI."""

    def __init__(self, message: str = MSG_UNKNOWN_ERROR):
        super().__init__(message)
        self.message = message


class ConfigError(ExamGeniusError):
    """The generation config was rejected before calling the API."""


class GenerationError(ExamGeniusError):
    """The AI call failed or returned an unusable response."""

    def __init__(self, message: str = MSG_GENERATION_FAILED):
        super().__init__(message)
