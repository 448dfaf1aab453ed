def translate_status(code: int) -> str:
    """
    Map an Xpand numeric work order status to its display label.

    Rules (label in parentheses):
    - 0 or 4 -> awaiting handling ("Väntar på handläggning")
    - 6 -> resource assigned ("Resurs tilldelad")
    - any other code 0..15 -> in progress ("Påbörjad")
    - 21 -> completed ("Utförd")
    - 80 -> sent ("Skickad")
    - 100 -> awaiting ordered goods ("Väntar på beställda varor")
    - any other code > 15 -> closed ("Avslutad")
    - negative codes -> "Unknown status: {code}"
    """
    if code == 0 or code == 4:
        return "Väntar på handläggning"
    if code == 6:
        return "Resurs tilldelad"
    if 0 <= code <= 15:
        return "Påbörjad"
    if code == 21:
        return "Utförd"
    if code == 80:
        return "Skickad"
    if code == 100:
        return "Väntar på beställda varor"
    if code > 15:
        return "Avslutad"

    return f"Unknown status: {code}"
