"""根据学生填写的意向年级和科目，标记推荐的家教需求"""
from tutormatch.utils.validators import split_tokens


def _field(obj, name):
    if obj is None:
        return ''
    if isinstance(obj, dict):
        value = obj.get(name)
    else:
        value = getattr(obj, name, None)
    return value or ''


def is_recommended(job, profile):
    """
    需求是否符合学生意向

    两个意向都没填时不推荐；任一意向年级出现在需求年级或标题中，
    或任一意向科目出现在需求科目或标题中，即为推荐。
    """
    grades = set(split_tokens(_field(profile, 'preferred_grades')))
    subjects = set(split_tokens(_field(profile, 'preferred_subjects')))
    if not grades and not subjects:
        return False

    title = _field(job, 'title')
    job_grade = _field(job, 'grade')
    job_subject = _field(job, 'subject')

    if any(g in job_grade or g in title for g in grades):
        return True
    return any(s in job_subject or s in title for s in subjects)
