from dataclasses import asdict, fields, is_dataclass
from typing import List

class FeedResourceBase():
    """
    Intended to be subclassed by a dataclass but isnt actually a dataclass.
    Feed records are built from Atom entries and the subclasses keep their
    own from_entry() constructor, this just gives the common dict handling.
    """
    def to_base(self) -> dict:
        """
        Default just return the dict representation of the object.
        Something more complicated can override.
        Also with a common base makes it easy to filter with isinstance.
        Call fixup() first to ensure all fields are in correct format.
        """
        self.fixup()
        return asdict(self)

    def fixup(self) -> None:
        """
        notify a subclass to do any field adjustments
        """
        pass

    def update_fields(self, **kwargs) -> List[str]:
        """
        Update fields that may be present.
        """
        updated_fields = []
        if is_dataclass(self):
            flist = fields(self)
            for k,v in kwargs.items():
                for f in flist:
                    if v is not None and k == f.name:
                        setattr(self, k, v)
                        updated_fields.append(k)
            self.fixup()
        return updated_fields
