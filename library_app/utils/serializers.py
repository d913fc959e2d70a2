def book_json(b):
    return {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "total_copies": b.total_copies,
        "available_copies": b.available_copies,
    }


def fine_json(f):
    return {
        "id": f.id,
        "borrow_id": f.borrow_id,
        "days_overdue": f.days_overdue,
        "daily_fee": float(f.daily_fee),
        "amount": float(f.amount),
        "status": f.status,
        "payment_method": f.payment_method,
        "paid_at": f.paid_at.isoformat() if f.paid_at else None,
        "created_at": f.created_at.isoformat(),
    }


def borrow_json(b, now=None):
    data = {
        "id": b.id,
        "book_id": b.book_id,
        "book_title": b.book.title if b.book else None,
        "borrowed_at": b.borrowed_at.isoformat(),
        "due_date": b.due_date.isoformat(),
        "returned_at": b.returned_at.isoformat() if b.returned_at else None,
        "fine": fine_json(b.fine) if b.fine else None,
    }
    if now is not None:
        data["status"] = b.status_at(now)
    return data


def user_json(u):
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "is_active": u.is_active,
        "created_at": u.created_at.isoformat(),
    }
