"""Embedded JavaScript for the Tyr HTML report.

The report body is rendered server-side, so the page is complete without
scripting. The script only adds a risk-level filter and collapsible
sections. The embedded ``tyr-data`` JSON block is left for tools that
extract results from a saved report; the script never inserts HTML strings.
"""

from __future__ import annotations

REPORT_JS: str = r"""
(function(){
"use strict";

/* --- Risk level filter --- */
var LEVELS=["Critical","High","Medium","Low","Unknown"];
var RANK={"Critical":4,"High":3,"Medium":2,"Low":1,"Unknown":0};
document.querySelectorAll("select.risk-filter").forEach(function(sel){
  var opt=document.createElement("option");
  opt.value="ALL";opt.textContent="All levels";sel.appendChild(opt);
  LEVELS.slice(0,4).forEach(function(l){
    var o=document.createElement("option");
    o.value=l;o.textContent=l+" and above";sel.appendChild(o);
  });
  var scope=document.getElementById(sel.getAttribute("data-scope"));
  var counter=sel.parentNode.querySelector(".shown");
  function apply(){
    var cards=scope?scope.querySelectorAll(".threat"):[];
    var min=sel.value==="ALL"?-1:RANK[sel.value];
    var shown=0;
    cards.forEach(function(c){
      var r=RANK[c.getAttribute("data-risk")];
      var keep=min<0||r===0||r>=min;
      c.classList.toggle("hidden",!keep);
      if(keep)shown++;
    });
    if(counter)counter.textContent=shown+" of "+cards.length+" shown";
  }
  sel.addEventListener("change",apply);
  apply();
});

/* --- Collapsible sections --- */
document.querySelectorAll(".section-header").forEach(function(hdr){
  hdr.addEventListener("click",function(){
    var body=hdr.nextElementSibling;if(!body)return;
    var hidden=body.classList.toggle("hidden");
    hdr.classList.toggle("collapsed",hidden);
  });
});

})();
"""
