"""
Data Models for nestedtree
Type-safe Pydantic models describing shift plans and manager statistics
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ShiftStep(BaseModel):
    """
    One bulk renumbering: add `offset` to every endpoint in [start, end)
    """
    offset: int = Field(description="Constant added to every matching endpoint")
    start: Optional[int] = Field(default=None, description="Inclusive lower bound, None for unbounded")
    end: Optional[int] = Field(default=None, description="Exclusive upper bound, None for unbounded")

    @property
    def is_noop(self) -> bool:
        """True when the step cannot change any endpoint"""
        if self.offset == 0:
            return True
        return self.start is not None and self.end is not None and self.start >= self.end


class RelocationPlan(BaseModel):
    """
    The three shifts that relocate a subtree, computed before anything is mutated
    """
    evacuate: ShiftStep = Field(description="Moves the subtree below the lowest endpoint")
    close: ShiftStep = Field(description="Closes the hole it left and opens the landing gap")
    reinsert: ShiftStep = Field(description="Moves the subtree into the landing gap")
    landing_left: int = Field(description="Left value the subtree root ends up with")
    width: int = Field(description="Number of integers the subtree occupies")

    @property
    def steps(self) -> List[ShiftStep]:
        return [self.evacuate, self.close, self.reinsert]


class TreeStatistics(BaseModel):
    """Counters about manager activity"""
    nodes_added: int = Field(default=0, description="Nodes placed by add_child or insert_before")
    subtrees_moved: int = Field(default=0, description="Successful relocations")
    shift_calls: int = Field(default=0, description="Bulk shift primitives issued")
    rejected_operations: int = Field(default=0, description="Calls refused before mutating anything")

    def reset(self) -> None:
        """Zero every counter"""
        self.nodes_added = 0
        self.subtrees_moved = 0
        self.shift_calls = 0
        self.rejected_operations = 0
